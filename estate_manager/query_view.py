"""Filtered, sorted and paginated view over the loaded properties.

The view is a pipeline of pure functions,
``filter_properties -> sort_properties -> paginate``, rerun in full every
time the data, a filter or the sort order changes. :class:`PropertyView`
keeps the inputs of that pipeline and hands out immutable :class:`Page`
snapshots.
"""

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Callable, Final, Iterable, Sequence

from .entities import Property
from .errors import ValidationError
from .logging import get_logger

logger = get_logger(__name__)

PAGE_SIZE: Final = 20


class FilterDimension(str, Enum):
    """Independent filter inputs of the view."""

    GENERAL = "general"
    OWNER = "owner"
    LOCATION = "location"
    MIN_PRICE = "min_price"
    MAX_PRICE = "max_price"


class SortField(str, Enum):
    """Property attributes the view can be sorted by."""

    ID = "id"
    OWNER = "owner"
    DESCRIPTION = "description"
    LOCATION = "location"
    SIZE = "size"
    PRICE = "price"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortKey:
    field: SortField
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class FilterSettings:
    """Raw text of every filter input; an empty string means inactive."""

    general: str = ""
    owner: str = ""
    location: str = ""
    min_price: str = ""
    max_price: str = ""

    def with_value(self, dimension: FilterDimension, value: str | None) -> "FilterSettings":
        return replace(self, **{dimension.value: value or ""})

    def as_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Page:
    """Snapshot of one page of the view."""

    rows: tuple[Property, ...]
    index: int
    page_count: int
    filtered_count: int
    total_count: int
    filters: FilterSettings = field(default_factory=FilterSettings)
    sort: tuple[SortKey, ...] = ()


def format_number(value: float) -> str:
    """Text form of a size or price used by the general filter."""
    return str(float(value))


def _contains(haystack: str | None, needle: str) -> bool:
    return haystack is not None and needle in haystack.lower()


def _parse_bound(text: str) -> float | None:
    if "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return None if math.isnan(value) else value


def build_predicate(filters: FilterSettings) -> Callable[[Property], bool]:
    """
    Combine the active filters into one predicate.

    All active dimensions must match. The general filter matches when the
    owner name, location, description, price or size contains it. Text
    comparisons ignore case and surrounding whitespace. Price bounds are
    inclusive; a bound that is not a number rejects every property.

    Args:
        filters (FilterSettings): Current filter inputs.

    Returns:
        Callable[[Property], bool]: Predicate selecting visible properties.
    """
    general = filters.general.strip().lower()
    owner = filters.owner.strip().lower()
    location = filters.location.strip().lower()
    min_text = filters.min_price.strip()
    max_text = filters.max_price.strip()
    min_price = _parse_bound(min_text) if min_text else None
    max_price = _parse_bound(max_text) if max_text else None

    if (min_text and min_price is None) or (max_text and max_price is None):
        return lambda prop: False

    def predicate(prop: Property) -> bool:
        if general and not (
            _contains(prop.owner_name, general)
            or _contains(prop.location, general)
            or _contains(prop.description, general)
            or general in format_number(prop.price)
            or general in format_number(prop.size)
        ):
            return False
        if owner and not _contains(prop.owner_name, owner):
            return False
        if location and not _contains(prop.location, location):
            return False
        if min_price is not None and prop.price < min_price:
            return False
        if max_price is not None and prop.price > max_price:
            return False
        return True

    return predicate


def filter_properties(
    properties: Iterable[Property], filters: FilterSettings
) -> list[Property]:
    predicate = build_predicate(filters)
    return [prop for prop in properties if predicate(prop)]


_SORT_VALUES: Final[dict[SortField, Callable[[Property], object]]] = {
    SortField.ID: lambda p: p.id,
    SortField.OWNER: lambda p: (p.owner_name or "").casefold(),
    SortField.DESCRIPTION: lambda p: p.description.casefold(),
    SortField.LOCATION: lambda p: p.location.casefold(),
    SortField.SIZE: lambda p: p.size,
    SortField.PRICE: lambda p: p.price,
}


def normalize_sort_key(key: SortKey) -> SortKey:
    """
    Coerce the field and direction of ``key`` to their enum members.

    Raises:
        ValidationError: If the field or direction is unknown.
    """
    try:
        return SortKey(SortField(key.field), SortDirection(key.direction))
    except ValueError:
        raise ValidationError(
            f"Unknown sort key {key.field!r} {key.direction!r}"
        ) from None


def sort_properties(
    properties: Iterable[Property], sort_keys: Sequence[SortKey]
) -> list[Property]:
    """
    Stable multi-key sort; the first key is the most significant.

    With no keys the input order is kept.
    """
    keys = [normalize_sort_key(key) for key in sort_keys]
    result = list(properties)
    # least significant key first; each pass is stable
    for key in reversed(keys):
        result.sort(
            key=_SORT_VALUES[key.field],
            reverse=key.direction == SortDirection.DESC,
        )
    return result


def count_pages(item_count: int, page_size: int) -> int:
    """Number of pages for ``item_count`` rows; never less than one."""
    return max(1, math.ceil(item_count / page_size))


def paginate(items: Sequence[Property], page_size: int, index: int) -> list[Property]:
    """
    Slice out page ``index`` (0-based).

    Raises:
        ValidationError: If ``index`` is outside ``[0, page count)``.
    """
    pages = count_pages(len(items), page_size)
    if not 0 <= index < pages:
        raise ValidationError(f"Page {index} is out of range (0..{pages - 1})")
    start = index * page_size
    return list(items[start : min(start + page_size, len(items))])


Listener = Callable[[Page], None]


class PropertyView:
    """
    Keeps the view inputs and the derived rows in sync.

    Changing the data, a filter or the sort order recomputes the visible
    rows, moves back to the first page and notifies subscribers.

    Args:
        page_size (int): Rows per page.
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        if page_size < 1:
            raise ValidationError("Page size must be at least 1")
        self.page_size = page_size
        self._properties: tuple[Property, ...] = ()
        self._filters = FilterSettings()
        self._sort: tuple[SortKey, ...] = ()
        self._visible: list[Property] = []
        self._page_index = 0
        self._listeners: list[Listener] = []

    @property
    def properties(self) -> tuple[Property, ...]:
        return self._properties

    @property
    def filters(self) -> FilterSettings:
        return self._filters

    @property
    def sort_keys(self) -> tuple[SortKey, ...]:
        return self._sort

    @property
    def filtered_count(self) -> int:
        return len(self._visible)

    @property
    def page_count(self) -> int:
        return count_pages(len(self._visible), self.page_size)

    @property
    def page_index(self) -> int:
        return self._page_index

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback fired with the current page after every change.

        Returns:
            Callable[[], None]: Function removing the subscription.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_data(self, properties: Iterable[Property]) -> Page:
        self._properties = tuple(properties)
        return self._recompute()

    def set_filter(self, dimension: FilterDimension | str, value: str | None) -> Page:
        try:
            dimension = FilterDimension(dimension)
        except ValueError:
            raise ValidationError(f"Unknown filter {dimension!r}") from None
        self._filters = self._filters.with_value(dimension, value)
        return self._recompute()

    def clear_filters(self) -> Page:
        self._filters = FilterSettings()
        return self._recompute()

    def set_sort(self, sort_keys: Iterable[SortKey]) -> Page:
        self._sort = tuple(normalize_sort_key(key) for key in sort_keys)
        return self._recompute()

    def get_page(self, index: int) -> Page:
        """
        Select page ``index`` and return it.

        Raises:
            ValidationError: If the page does not exist.
        """
        rows = paginate(self._visible, self.page_size, index)
        self._page_index = index
        page = self._snapshot(rows)
        self._notify(page)
        return page

    def current_page(self) -> Page:
        return self._snapshot(paginate(self._visible, self.page_size, self._page_index))

    def _snapshot(self, rows: Sequence[Property]) -> Page:
        return Page(
            rows=tuple(rows),
            index=self._page_index,
            page_count=self.page_count,
            filtered_count=self.filtered_count,
            total_count=len(self._properties),
            filters=self._filters,
            sort=self._sort,
        )

    def _recompute(self) -> Page:
        filtered = filter_properties(self._properties, self._filters)
        self._visible = sort_properties(filtered, self._sort)
        self._page_index = 0
        page = self.current_page()
        logger.debug(
            "view_recomputed",
            total=page.total_count,
            filtered=page.filtered_count,
            pages=page.page_count,
        )
        self._notify(page)
        return page

    def _notify(self, page: Page) -> None:
        for listener in list(self._listeners):
            listener(page)
