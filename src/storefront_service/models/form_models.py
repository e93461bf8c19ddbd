"""Admin form models and user notifications.

Admin screens submit loosely typed field maps (numbers often arrive as
strings). These models give each entity an explicit create form, with
required fields, and an update form, where every field is optional and only
the submitted ones are written. Values that do not parse are rejected
instead of being coerced to zero.
"""

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class NotificationLevel(str, Enum):
    """Severity of a notification shown to the administrator."""

    SUCCESS = "success"
    ERROR = "error"


class NotificationKind(str, Enum):
    """What produced a notification."""

    MUTATION = "mutation"
    REMOTE = "remote"
    VALIDATION = "validation"
    CONFIRMATION = "confirmation"


class Notification(BaseModel):
    """Short, non-technical message describing the outcome of an operation."""

    level: NotificationLevel
    kind: NotificationKind
    title: str
    message: str

    @classmethod
    def success(cls, message: str) -> "Notification":
        return cls(
            level=NotificationLevel.SUCCESS,
            kind=NotificationKind.MUTATION,
            title="Success",
            message=message,
        )

    @classmethod
    def error(cls, kind: NotificationKind, message: str) -> "Notification":
        return cls(level=NotificationLevel.ERROR, kind=kind, title="Error", message=message)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _require_text(value: str | None, field_name: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{field_name} must not be empty")
    return value.strip()


def describe_validation_error(error: ValidationError) -> str:
    """Build a user-facing message naming the fields that failed validation.

    Args:
        error: The pydantic validation error

    Returns:
        Message such as "Please check: name, price"
    """
    fields: list[str] = []
    for detail in error.errors():
        location = detail.get("loc") or ("form",)
        field = str(location[0])
        if field not in fields:
            fields.append(field)
    return f"Please check: {', '.join(fields)}"


class _FormModel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    def to_row(self) -> dict[str, Any]:
        """Row for an insert: every field, store column names."""
        return self.model_dump()

    def to_partial_row(self) -> dict[str, Any]:
        """Row for an update: only the fields that were submitted."""
        return self.model_dump(exclude_unset=True)


class CategoryForm(_FormModel):
    """Fields submitted from the add-category form."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    display_order: int = 0
    is_active: bool = True

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("display_order", mode="before")
    @classmethod
    def blank_display_order(cls, v: Any) -> Any:
        # An untouched order field means "no preference", not a parse failure
        return 0 if _blank_to_none(v) is None else v


class CategoryUpdate(_FormModel):
    """Partial category fields submitted from an inline edit."""

    name: str | None = None
    description: str | None = None
    display_order: int | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        return _require_text(v, "name")

    @field_validator("description", mode="before")
    @classmethod
    def blank_description(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("display_order", "is_active")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("value is required when the field is submitted")
        return v


class ProductForm(_FormModel):
    """Fields submitted from the add-product form."""

    category_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    image_url: str | None = None
    display_order: int = 0
    is_available: bool = True

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def blank_optional_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("display_order", mode="before")
    @classmethod
    def blank_display_order(cls, v: Any) -> Any:
        return 0 if _blank_to_none(v) is None else v


class ProductUpdate(_FormModel):
    """Partial product fields submitted from the edit form."""

    category_id: str | None = None
    name: str | None = None
    description: str | None = None
    price: Decimal | None = Field(None, ge=0)
    image_url: str | None = None
    display_order: int | None = None
    is_available: bool | None = None

    @field_validator("category_id", "name")
    @classmethod
    def text_not_blank(cls, v: str | None, info: Any) -> str | None:
        return _require_text(v, info.field_name)

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def blank_optional_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("price", "display_order", "is_available")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("value is required when the field is submitted")
        return v
