"""FastAPI application for the storefront and the admin back-office."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Cookie, Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront_service.auth.auth_client import AdminUser
from storefront_service.auth.session_dependencies import (
    LOGIN_PATH,
    SESSION_COOKIE,
    extract_session_tokens,
    get_admin_from_tokens,
)
from storefront_service.auth.session_gate import LoginCredentials, SessionGate
from storefront_service.models.form_models import NotificationKind
from storefront_service.models.menu_models import Category, MenuCategory, Product
from storefront_service.models.order_models import (
    DashboardStat,
    Order,
    OrderListing,
    OrderSortField,
    OrderStatusEnum,
    SortDirection,
)
from storefront_service.services.crud_synchronizer import CrudSynchronizer, ListState, ListView
from storefront_service.services.dashboard_service import DashboardService
from storefront_service.services.menu_aggregator import MenuAggregator

logger = logging.getLogger(__name__)

BRAND_NAME = "Melt&Munch"

# HTTP status for each kind of failed admin operation
_FAILURE_STATUS = {
    NotificationKind.VALIDATION: 422,
    NotificationKind.CONFIRMATION: 409,
    NotificationKind.REMOTE: 502,
}


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class StorefrontIndex(BaseModel):
    """Public landing page content."""

    brand: str
    highlights: list[str]
    links: dict[str, str]


class MenuResponse(BaseModel):
    """Public menu; `error` is set and `categories` empty when the menu could not be loaded."""

    categories: list[MenuCategory]
    error: str | None = None


class LoginSurface(BaseModel):
    """What the admin login screen needs to render."""

    authenticated: bool
    fields: list[str]
    submit_path: str


class LoginResponse(BaseModel):
    """Response to a login attempt."""

    success: bool
    user: AdminUser | None = None
    access_token: str | None = None
    error: str | None = None


class DashboardResponse(BaseModel):
    """Dashboard stat cards and recent orders."""

    stats: list[DashboardStat]
    recent_orders: list[Order]


def _view_response(
    synchronizer: CrudSynchronizer[Any], ok: bool, success_status: int = 200
) -> JSONResponse:
    """Serialize a synchronizer view with a status reflecting the operation outcome."""
    status_code = success_status
    if not ok and synchronizer.notification is not None:
        status_code = _FAILURE_STATUS.get(synchronizer.notification.kind, 200)
    return JSONResponse(status_code=status_code, content=synchronizer.view().model_dump(mode="json"))


def create_app(
    menu_aggregator: MenuAggregator,
    category_synchronizer: CrudSynchronizer[Category],
    product_synchronizer: CrudSynchronizer[Product],
    session_gate: SessionGate,
    dashboard_service: DashboardService,
    restore_refresh_token: str | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_aggregator: Service building the public menu
        category_synchronizer: Synchronizer behind the categories screen
        product_synchronizer: Synchronizer behind the products screen
        session_gate: Gate holding the administrator session
        dashboard_service: Service for the dashboard and orders screens
        restore_refresh_token: Refresh token used to restore a session on startup

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        await session_gate.initialize(restore_refresh_token)
        yield
        category_synchronizer.close()
        product_synchronizer.close()
        logger.info("Admin screens closed")

    app = FastAPI(
        title="Storefront Service",
        description="Public menu and admin back-office for categories, products and orders",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Store services in app state for access in route handlers
    app.state.menu_aggregator = menu_aggregator
    app.state.category_synchronizer = category_synchronizer
    app.state.product_synchronizer = product_synchronizer
    app.state.session_gate = session_gate
    app.state.dashboard_service = dashboard_service

    async def require_admin(
        admin_session: str | None = Cookie(None),
        authorization: str | None = Header(None),
    ) -> AdminUser:
        """Dependency gating the admin routes."""
        tokens = extract_session_tokens(admin_session, authorization)
        return await get_admin_from_tokens(tokens, app.state.session_gate)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint.

        Returns:
            Health status indicating service is running
        """
        return HealthResponse(status="healthy")

    @app.get("/", response_model=StorefrontIndex, tags=["Storefront"])
    async def storefront_index() -> StorefrontIndex:
        return StorefrontIndex(
            brand=BRAND_NAME,
            highlights=["Easy Ordering", "Community Loved", "Premium Quality"],
            links={"menu": "/menu", "admin": LOGIN_PATH},
        )

    @app.get("/menu", response_model=MenuResponse, tags=["Storefront"])
    async def get_menu() -> MenuResponse:
        """Public menu: active categories with their available products.

        Returns:
            The nested menu, or an empty menu with an error message
        """
        menu = await app.state.menu_aggregator.get_menu()
        if menu is None:
            return MenuResponse(categories=[], error="The menu could not be loaded. Please try again.")
        return MenuResponse(categories=menu)

    @app.get(LOGIN_PATH, response_model=LoginSurface, tags=["Admin Session"])
    async def login_surface() -> LoginSurface:
        return LoginSurface(
            authenticated=await app.state.session_gate.ensure_fresh(),
            fields=["email", "password"],
            submit_path=LOGIN_PATH,
        )

    @app.post(LOGIN_PATH, response_model=LoginResponse, tags=["Admin Session"])
    async def login(credentials: LoginCredentials) -> JSONResponse:
        """Sign in an administrator and set the session cookie.

        Args:
            credentials: Email and password

        Returns:
            Login outcome; 401 if the credentials were rejected
        """
        gate: SessionGate = app.state.session_gate
        result = await gate.login(credentials)
        if not result.success:
            body = LoginResponse(success=False, error=result.error)
            return JSONResponse(status_code=401, content=body.model_dump(mode="json"))

        body = LoginResponse(success=True, user=result.user, access_token=gate.access_token)
        response = JSONResponse(content=body.model_dump(mode="json"))
        response.set_cookie(SESSION_COOKIE, gate.access_token or "", httponly=True, samesite="lax")
        return response

    @app.post("/admin/logout", response_model=HealthResponse, tags=["Admin Session"])
    async def logout() -> JSONResponse:
        await app.state.session_gate.logout()
        response = JSONResponse(content={"status": "logged_out"})
        response.delete_cookie(SESSION_COOKIE)
        return response

    @app.get("/admin/dashboard", response_model=DashboardResponse, tags=["Admin"])
    async def dashboard(_admin: AdminUser = Depends(require_admin)) -> DashboardResponse:
        service: DashboardService = app.state.dashboard_service
        return DashboardResponse(stats=service.get_stats(), recent_orders=service.get_recent_orders())

    @app.get("/admin/orders", response_model=OrderListing, tags=["Admin"])
    async def list_orders(
        search: str = "",
        status: str = "all",
        sort_by: OrderSortField = OrderSortField.DATE,
        sort_order: SortDirection = SortDirection.DESC,
        _admin: AdminUser = Depends(require_admin),
    ) -> OrderListing:
        """Orders table with search, status filter and sorting.

        Args:
            search: Text matched against customer, order id and email
            status: "all" or an order status
            sort_by: Column to sort by
            sort_order: asc or desc

        Returns:
            Matching orders and the unfiltered total

        Raises:
            HTTPException: 422 if the status is unknown
        """
        status_filter: OrderStatusEnum | None = None
        if status != "all":
            try:
                status_filter = OrderStatusEnum(status)
            except ValueError:
                raise HTTPException(status_code=422, detail=f"Unknown order status '{status}'")

        listing: OrderListing = app.state.dashboard_service.list_orders(
            search=search, status=status_filter, sort_by=sort_by, direction=sort_order
        )
        return listing

    _register_crud_routes(app, "/admin/menu-categories", "category_synchronizer", Category, require_admin)
    _register_crud_routes(app, "/admin/products", "product_synchronizer", Product, require_admin)

    return app


def _register_crud_routes(
    app: FastAPI,
    path: str,
    state_attr: str,
    model: type[BaseModel],
    require_admin: Any,
) -> None:
    """Register list/create/update/delete/edit-mode routes for one admin screen.

    Args:
        app: Application to register the routes on
        path: Base path of the screen
        state_attr: Name of the synchronizer on `app.state`
        model: Entity model listed by the screen
        require_admin: Dependency gating the routes
    """
    tag = path.rsplit("/", 1)[-1].replace("-", " ").title()
    view_model = ListView[model]  # type: ignore[valid-type]

    def synchronizer() -> CrudSynchronizer[Any]:
        sync: CrudSynchronizer[Any] = getattr(app.state, state_attr)
        return sync

    @app.get(path, response_model=view_model, tags=[tag])
    async def list_rows(_admin: AdminUser = Depends(require_admin)) -> JSONResponse:
        sync = synchronizer()
        ok = await sync.refresh()
        return _view_response(sync, ok)

    @app.post(path, response_model=view_model, status_code=201, tags=[tag])
    async def create_row(
        fields: dict[str, Any] = Body(...), _admin: AdminUser = Depends(require_admin)
    ) -> JSONResponse:
        sync = synchronizer()
        ok = await sync.create(fields)
        return _view_response(sync, ok, success_status=201)

    @app.patch(path + "/{row_id}", response_model=view_model, tags=[tag])
    async def update_row(
        row_id: str,
        fields: dict[str, Any] = Body(...),
        _admin: AdminUser = Depends(require_admin),
    ) -> JSONResponse:
        sync = synchronizer()
        ok = await sync.update(row_id, fields)
        return _view_response(sync, ok)

    @app.delete(path + "/{row_id}", response_model=view_model, tags=[tag])
    async def delete_row(
        row_id: str, confirm: bool = False, _admin: AdminUser = Depends(require_admin)
    ) -> JSONResponse:
        sync = synchronizer()
        ok = await sync.delete(row_id, confirmed=confirm)
        return _view_response(sync, ok)

    @app.post(path + "/{row_id}/edit", response_model=view_model, tags=[tag])
    async def begin_edit(row_id: str, _admin: AdminUser = Depends(require_admin)) -> JSONResponse:
        sync = synchronizer()
        if sync.state == ListState.IDLE:
            await sync.refresh()
        ok = sync.begin_edit(row_id)
        return _view_response(sync, ok)

    @app.delete(path + "/{row_id}/edit", response_model=view_model, tags=[tag])
    async def cancel_edit(row_id: str, _admin: AdminUser = Depends(require_admin)) -> JSONResponse:
        sync = synchronizer()
        if sync.editing_id == row_id:
            sync.cancel_edit()
        return _view_response(sync, True)
