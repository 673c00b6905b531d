from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from . import entities
from .query_view import FilterDimension, Page, SortDirection, SortField, SortKey


class UserBase(BaseModel):
    """Shared fields for user schemas."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    """Payload for creating a new user."""

    def to_entity(self) -> entities.User:
        return entities.User(name=self.name, email=self.email)


class UserUpdate(UserBase):
    """Payload for replacing a user (every field required)."""

    def to_entity(self, user_id: int) -> entities.User:
        return entities.User(id=user_id, name=self.name, email=self.email)


class UserOut(UserBase):
    """Response schema for user data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    # stored emails are returned as-is
    email: str


class PropertyBase(BaseModel):
    """Shared fields for property schemas."""

    owner_id: int
    description: str = ""
    location: str
    size: float
    price: float


class PropertyCreate(PropertyBase):
    """Payload for creating a new property."""

    def to_entity(self) -> entities.Property:
        return entities.Property(**self.model_dump())


class PropertyUpdate(PropertyBase):
    """Payload for replacing a property (every field required)."""

    def to_entity(self, property_id: int) -> entities.Property:
        return entities.Property(id=property_id, **self.model_dump())


class PropertyOut(PropertyBase):
    """Response schema for a property with its owner's details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None


class DeleteResult(BaseModel):
    """Number of rows a delete removed."""

    deleted: int


class FilterValue(BaseModel):
    """New raw text for one filter input; empty disables the filter."""

    value: str = ""


class SortKeyIn(BaseModel):
    field: SortField
    direction: SortDirection = SortDirection.ASC


class SortRequest(BaseModel):
    """Sort order, most significant key first. Empty keeps store order."""

    keys: list[SortKeyIn] = []

    def to_keys(self) -> list[SortKey]:
        return [SortKey(key.field, key.direction) for key in self.keys]


class PageOut(BaseModel):
    """One page of the filtered and sorted property view."""

    rows: list[PropertyOut]
    index: int
    page_count: int
    filtered_count: int
    total_count: int
    filters: dict[FilterDimension, str]
    sort: list[SortKeyIn]

    @classmethod
    def from_page(cls, page: Page) -> "PageOut":
        return cls(
            rows=[PropertyOut.model_validate(row) for row in page.rows],
            index=page.index,
            page_count=page.page_count,
            filtered_count=page.filtered_count,
            total_count=page.total_count,
            filters=page.filters.as_dict(),
            sort=[SortKeyIn(field=key.field, direction=key.direction) for key in page.sort],
        )
