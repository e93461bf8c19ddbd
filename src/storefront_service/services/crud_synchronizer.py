"""CRUD synchronizer shared by the admin management screens.

Every admin list follows the same protocol: validate the submitted form,
send one mutation to the hosted store, report the outcome, then re-read the
whole collection. Local state is never patched from the mutation itself, so
ordering and generated fields (`id`, `created_at`) always come from the store.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from storefront_service.gateways.base_gateway import DISPLAY_ORDER, TableGateway
from storefront_service.models.form_models import (
    CategoryForm,
    CategoryUpdate,
    Notification,
    NotificationKind,
    ProductForm,
    ProductUpdate,
    describe_validation_error,
)
from storefront_service.models.menu_models import (
    CATEGORIES_COLLECTION,
    PRODUCTS_COLLECTION,
    Category,
    Product,
    parse_rows,
)
from storefront_service.observability.decorators import traced
from storefront_service.observability.metrics import record_mutation

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class ListState(str, Enum):
    """Lifecycle of a managed list."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class CollectionDescriptor(Generic[T]):
    """Describes one managed collection.

    Attributes:
        collection: Table name in the hosted store
        label: Singular entity name used in notifications
        plural: Plural entity name used in notifications
        model: Entity model type
        parse_row: Builds the entity model from a store row
        create_form: Form model validating an insert
        update_form: Form model validating a partial update
    """

    collection: str
    label: str
    plural: str
    model: type[T]
    parse_row: Callable[[dict[str, Any]], T]
    create_form: type[BaseModel]
    update_form: type[BaseModel]


CATEGORY_DESCRIPTOR: CollectionDescriptor[Category] = CollectionDescriptor(
    collection=CATEGORIES_COLLECTION,
    label="category",
    plural="categories",
    model=Category,
    parse_row=Category.from_row,
    create_form=CategoryForm,
    update_form=CategoryUpdate,
)

PRODUCT_DESCRIPTOR: CollectionDescriptor[Product] = CollectionDescriptor(
    collection=PRODUCTS_COLLECTION,
    label="product",
    plural="products",
    model=Product,
    parse_row=Product.from_row,
    create_form=ProductForm,
    update_form=ProductUpdate,
)


class CategoryOption(BaseModel):
    """Entry of the category picker on the products screen."""

    id: str
    name: str


class ListView(BaseModel, Generic[T]):
    """Snapshot of a managed list as served to the admin screen."""

    state: ListState
    items: list[T]
    editing_id: str | None = None
    add_form: dict[str, Any] | None = None
    notification: Notification | None = None
    category_options: list[CategoryOption] | None = None


class CrudSynchronizer(Generic[T]):
    """Create/update/delete-then-refetch protocol for one collection.

    One instance backs one admin screen and owns that screen's list state
    exclusively. Failures never raise: they leave the previously loaded items
    in place and set an error notification, so the next call can retry.
    """

    def __init__(self, gateway: TableGateway, descriptor: CollectionDescriptor[T]) -> None:
        """Initialize the synchronizer.

        Args:
            gateway: Gateway to the hosted data store
            descriptor: The collection this synchronizer manages
        """
        self.gateway = gateway
        self.descriptor = descriptor
        self.state = ListState.IDLE
        self.items: list[T] = []
        self.editing_id: str | None = None
        self.add_form: dict[str, Any] | None = None
        self.notification: Notification | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Tear down the synchronizer; results of requests still in flight are dropped."""
        self._closed = True

    def view(self) -> ListView[T]:
        return ListView[self.descriptor.model](
            state=self.state,
            items=list(self.items),
            editing_id=self.editing_id,
            add_form=self.add_form,
            notification=self.notification,
        )

    async def refresh(self) -> bool:
        """List the collection, clearing any previous notification.

        Returns:
            True if a fresh list was loaded, False otherwise
        """
        self.notification = None
        return await self._fetch()

    async def _fetch(self) -> bool:
        self.state = ListState.LOADING
        rows = await self.gateway.select(self.descriptor.collection, order=DISPLAY_ORDER)
        if self._closed:
            return False

        items = (
            None
            if rows is None
            else parse_rows(self.descriptor.parse_row, rows, self.descriptor.collection)
        )
        if items is None:
            # Stale but available: keep showing what was loaded before
            self.state = ListState.ERROR
            self.notification = Notification.error(
                NotificationKind.REMOTE, f"Failed to fetch {self.descriptor.plural}"
            )
            return False

        self.items = items
        self.state = ListState.READY
        return True

    def _reject(self, operation: str, error: ValidationError | str) -> bool:
        message = error if isinstance(error, str) else describe_validation_error(error)
        self.notification = Notification.error(NotificationKind.VALIDATION, message)
        record_mutation(self.descriptor.collection, operation, "validation_error")
        return False

    def _remote_failure(self, operation: str, verb: str) -> bool:
        self.notification = Notification.error(
            NotificationKind.REMOTE, f"Failed to {verb} {self.descriptor.label}"
        )
        record_mutation(self.descriptor.collection, operation, "remote_error")
        return False

    async def _succeed(self, operation: str, past_tense: str) -> bool:
        record_mutation(self.descriptor.collection, operation, "success")
        self.notification = Notification.success(
            f"{self.descriptor.label.capitalize()} {past_tense} successfully"
        )
        # The re-list is only issued once the mutation has been acknowledged
        await self._fetch()
        return True

    @traced("admin.create")
    async def create(self, raw_fields: dict[str, Any]) -> bool:
        """Validate and insert a new row, then re-list.

        The submitted fields stay in `add_form` until the insert succeeds.

        Args:
            raw_fields: Field values as submitted by the add form

        Returns:
            True if the row was inserted, False otherwise
        """
        self.add_form = dict(raw_fields)
        try:
            form = self.descriptor.create_form.model_validate(raw_fields)
        except ValidationError as e:
            return self._reject("create", e)

        inserted = await self.gateway.insert(self.descriptor.collection, form.to_row())
        if self._closed:
            return False
        if not inserted:
            return self._remote_failure("create", "add")

        self.add_form = None
        return await self._succeed("create", "added")

    def begin_edit(self, row_id: str) -> bool:
        """Enter edit mode for a listed row.

        Args:
            row_id: Identifier of the row to edit

        Returns:
            True if the row is in the current list, False otherwise
        """
        if not any(getattr(item, "id", None) == row_id for item in self.items):
            self.notification = Notification.error(
                NotificationKind.VALIDATION, f"Unknown {self.descriptor.label}: {row_id}"
            )
            return False

        self.editing_id = row_id
        return True

    def cancel_edit(self) -> None:
        self.editing_id = None

    @traced("admin.update")
    async def update(self, row_id: str, raw_partial: dict[str, Any]) -> bool:
        """Validate and apply a partial update, then re-list.

        Args:
            row_id: Identifier of the row to update
            raw_partial: Submitted subset of fields

        Returns:
            True if the update was applied, False otherwise
        """
        try:
            form = self.descriptor.update_form.model_validate(raw_partial)
        except ValidationError as e:
            return self._reject("update", e)

        partial_row = form.to_partial_row()
        if not partial_row:
            return self._reject("update", "Nothing to update")

        updated = await self.gateway.update(self.descriptor.collection, row_id, partial_row)
        if self._closed:
            return False
        if not updated:
            return self._remote_failure("update", "update")

        self.editing_id = None
        return await self._succeed("update", "updated")

    @traced("admin.delete")
    async def delete(self, row_id: str, confirmed: bool = False) -> bool:
        """Permanently delete a row once the user has confirmed, then re-list.

        Args:
            row_id: Identifier of the row to delete
            confirmed: Whether the user confirmed the deletion

        Returns:
            True if the row was deleted, False otherwise
        """
        if not confirmed:
            self.notification = Notification.error(
                NotificationKind.CONFIRMATION,
                f"Are you sure you want to delete this {self.descriptor.label}? Confirm to continue.",
            )
            record_mutation(self.descriptor.collection, "delete", "unconfirmed")
            return False

        deleted = await self.gateway.delete(self.descriptor.collection, row_id)
        if self._closed:
            return False
        if not deleted:
            return self._remote_failure("delete", "delete")

        if self.editing_id == row_id:
            self.editing_id = None
        return await self._succeed("delete", "deleted")


class ProductSynchronizer(CrudSynchronizer[Product]):
    """Synchronizer for the products screen.

    Besides the products themselves, each re-list reads the categories so
    every product carries its category name and the add/edit forms can
    offer the active categories.
    """

    def __init__(self, gateway: TableGateway) -> None:
        super().__init__(gateway, PRODUCT_DESCRIPTOR)
        self.category_options: list[CategoryOption] = []

    def view(self) -> ListView[Product]:
        view = super().view()
        view.category_options = list(self.category_options)
        return view

    async def _fetch(self) -> bool:
        if not await super()._fetch():
            return False

        category_rows = await self.gateway.select(CATEGORIES_COLLECTION, order=DISPLAY_ORDER)
        if self._closed:
            return False
        categories = (
            None
            if category_rows is None
            else parse_rows(Category.from_row, category_rows, CATEGORIES_COLLECTION)
        )
        if categories is None:
            # Product list is still valid; only the names are missing
            logger.warning("Failed to fetch categories for the products screen")
            return True

        names = {category.id: category.name for category in categories}
        self.items = [
            product.model_copy(update={"category_name": names.get(product.category_id)})
            for product in self.items
        ]
        self.category_options = [
            CategoryOption(id=category.id, name=category.name)
            for category in categories
            if category.is_active
        ]
        return True


def create_category_synchronizer(gateway: TableGateway) -> CrudSynchronizer[Category]:
    return CrudSynchronizer(gateway, CATEGORY_DESCRIPTOR)
