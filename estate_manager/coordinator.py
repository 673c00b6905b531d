"""Refresh coordination and the entry point used by the presentation layer.

Every successful mutation is followed by a full reload of users and
properties, and the reloaded properties are pushed through the view with
the filters and sort order already in place.
"""

from functools import lru_cache
from typing import Callable, Iterable

from .core import get_settings
from .entities import Property, User
from .errors import RefreshError, StaleViewError, StoreError
from .logging import get_logger
from .query_view import FilterDimension, Page, PropertyView, SortKey
from .repositories import PropertyRepository, UserRepository
from .store import StoreAdapter

logger = get_logger(__name__)


class RefreshCoordinator:
    """
    Front door for listing, mutating and viewing users and properties.

    Args:
        users (UserRepository): User repository.
        properties (PropertyRepository): Property repository.
        view (PropertyView): View driven by the reloaded properties.
    """

    def __init__(
        self,
        users: UserRepository,
        properties: PropertyRepository,
        view: PropertyView,
    ):
        self.user_repo = users
        self.property_repo = properties
        self.view = view
        self._users: tuple[User, ...] = ()

    @classmethod
    def from_store(cls, store: StoreAdapter, page_size: int) -> "RefreshCoordinator":
        return cls(UserRepository(store), PropertyRepository(store), PropertyView(page_size))

    @property
    def users(self) -> tuple[User, ...]:
        """Users as of the last refresh."""
        return self._users

    def refresh_all(self) -> Page:
        """
        Reload both collections and re-drive the view.

        A collection that fails to load keeps its previous contents; the
        other one is still refreshed and the view recomputed before the
        failure is reported.

        Raises:
            RefreshError: With one entry per collection that failed.

        Returns:
            Page: First page of the recomputed view.
        """
        failures: dict[str, StoreError] = {}

        try:
            self._users = tuple(self.user_repo.list_all())
        except StoreError as exc:
            failures["users"] = exc

        properties = self.view.properties
        try:
            properties = self.property_repo.list_all()
        except StoreError as exc:
            failures["properties"] = exc

        page = self.view.set_data(properties)

        if failures:
            logger.warning("refresh_incomplete", failed=sorted(failures))
            raise RefreshError(failures)

        logger.info(
            "refresh_complete",
            users=len(self._users),
            properties=page.total_count,
        )
        return page

    # Reads

    def list_users(self) -> list[User]:
        return self.user_repo.list_all()

    def list_properties(self) -> list[Property]:
        return self.property_repo.list_all()

    def get_user(self, user_id: int) -> User:
        return self.user_repo.get(user_id)

    def get_property(self, property_id: int) -> Property:
        return self.property_repo.get(property_id)

    # Mutations

    def _refresh_after(self, result):
        """Refresh after a committed write; a failed reload becomes StaleViewError."""
        try:
            self.refresh_all()
        except RefreshError as exc:
            raise StaleViewError(exc.failures, committed=result) from exc
        return result

    def add_user(self, user: User) -> User:
        created = self.user_repo.add(user)
        return self._refresh_after(created)

    def update_user(self, user: User) -> User:
        updated = self.user_repo.update(user)
        return self._refresh_after(updated)

    def delete_user(self, user_id: int) -> int:
        removed = self.user_repo.delete(user_id)
        return self._refresh_after(removed)

    def add_property(self, prop: Property) -> Property:
        created = self.property_repo.add(prop)
        return self._refresh_after(created)

    def update_property(self, prop: Property) -> Property:
        updated = self.property_repo.update(prop)
        return self._refresh_after(updated)

    def delete_property(self, property_id: int) -> int:
        removed = self.property_repo.delete(property_id)
        return self._refresh_after(removed)

    # View

    def set_filter(self, dimension: FilterDimension | str, value: str | None) -> Page:
        return self.view.set_filter(dimension, value)

    def clear_filters(self) -> Page:
        return self.view.clear_filters()

    def set_sort(self, sort_keys: Iterable[SortKey]) -> Page:
        return self.view.set_sort(sort_keys)

    def get_page(self, index: int) -> Page:
        return self.view.get_page(index)

    def current_page(self) -> Page:
        return self.view.current_page()

    def subscribe(self, listener: Callable[[Page], None]) -> Callable[[], None]:
        return self.view.subscribe(listener)


@lru_cache()
def get_coordinator() -> RefreshCoordinator:
    """
    Return the process-wide coordinator bound to the configured database.

    Used as a FastAPI dependency; tests override it.
    """
    from .database import engine

    return RefreshCoordinator.from_store(StoreAdapter(engine), get_settings().PAGE_SIZE)
