"""Referential integrity rules shared by the repositories.

A property may only be written when its owner exists, and a user may only
be reported as deleted once none of its properties remain. Both rules are
checked here, independently of whether the backend enforces the foreign
key and its ``ON DELETE CASCADE`` on its own.
"""

import math

from sqlalchemy import delete, func, select

from .entities import UNASSIGNED_ID, Property, User
from .errors import CascadeError, OwnerReferenceError, StoreError, ValidationError
from .logging import get_logger
from .models import properties_table, users_table
from .store import BoundStatements, StoreAdapter

logger = get_logger(__name__)


def _check_amount(field: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{field} must be a non-negative number")


def validate_property(prop: Property, *, for_insert: bool) -> None:
    """
    Check a property's own fields before it reaches the store.

    Args:
        prop (Property): Property about to be written.
        for_insert (bool): True for an add (id must be unassigned),
            False for an update (id must be assigned).

    Raises:
        ValidationError: If size or price is negative or not finite, or
            the id does not fit the operation.
    """
    if for_insert and prop.id != UNASSIGNED_ID:
        raise ValidationError("A new property must not carry an id")
    if not for_insert and prop.id <= UNASSIGNED_ID:
        raise ValidationError("An existing property id is required")
    _check_amount("size", prop.size)
    _check_amount("price", prop.price)


def require_owner(statements: BoundStatements, owner_id: int) -> User:
    """
    Resolve the owner of a property inside the caller's transaction.

    Args:
        statements (BoundStatements): Open unit of work.
        owner_id (int): Referenced user id.

    Raises:
        OwnerReferenceError: If no user has ``owner_id``.

    Returns:
        User: The owning user.
    """
    rows = statements.query(select(users_table).where(users_table.c.id == owner_id))
    if not rows:
        raise OwnerReferenceError(owner_id)
    return User.from_row(rows[0])


def count_dangling_properties(store: StoreAdapter, user_id: int | None = None) -> int:
    """
    Count properties whose owner does not exist.

    Args:
        store (StoreAdapter): Store to probe.
        user_id (int | None): Restrict the probe to one owner id.

    Returns:
        int: Number of orphaned property rows.
    """
    stmt = (
        select(func.count().label("dangling"))
        .select_from(
            properties_table.outerjoin(
                users_table, properties_table.c.owner_id == users_table.c.id
            )
        )
        .where(users_table.c.id.is_(None))
    )
    if user_id is not None:
        stmt = stmt.where(properties_table.c.owner_id == user_id)
    rows = store.query(stmt)
    return int(rows[0]["dangling"]) if rows else 0


def _delete_dependents(statements: BoundStatements, user_id: int) -> int:
    return statements.execute(
        delete(properties_table).where(properties_table.c.owner_id == user_id)
    )


def cascade_delete_user(store: StoreAdapter, user_id: int) -> int:
    """
    Delete a user together with every property it owns.

    Dependent properties are removed first, then the user, in a single
    transaction. Afterwards the store is probed for properties still
    pointing at ``user_id``.

    Args:
        store (StoreAdapter): Store to operate on.
        user_id (int): User to delete.

    Raises:
        CascadeError: If the dependent delete failed (nothing changed), or
            if properties still reference the user after commit.
        StoreError: If deleting the user itself failed (nothing changed).

    Returns:
        int: Number of users removed (0 when the id did not exist).
    """
    with store.unit_of_work() as statements:
        try:
            removed_properties = _delete_dependents(statements, user_id)
        except StoreError as exc:
            logger.error("cascade_dependents_failed", user_id=user_id, error=str(exc))
            raise CascadeError(user_id) from exc
        removed_users = statements.execute(
            delete(users_table).where(users_table.c.id == user_id)
        )

    if removed_users:
        dangling = count_dangling_properties(store, user_id)
        if dangling:
            logger.error("cascade_left_orphans", user_id=user_id, dangling=dangling)
            raise CascadeError(user_id, dangling=dangling, inconsistent=True)

    logger.info(
        "user_deleted",
        user_id=user_id,
        users=removed_users,
        properties=removed_properties,
    )
    return removed_users
