"""Repositories for users and properties.

Data access for both entities, isolated from the HTTP routes and from the
view. Each method maps store failures to the domain errors callers can act
on.
"""

from dataclasses import replace

from sqlalchemy import delete, insert, select, update

from . import consistency
from .entities import UNASSIGNED_ID, Property, User
from .errors import (
    ConstraintViolation,
    DuplicateEmailError,
    NotFoundError,
    OrphanedPropertyError,
    OwnerReferenceError,
    ValidationError,
)
from .logging import get_logger
from .models import properties_table, users_table
from .store import StoreAdapter

logger = get_logger(__name__)


def _validate_user(user: User) -> None:
    if not user.name or not user.name.strip():
        raise ValidationError("User name must not be empty")


class UserRepository:
    """
    CRUD for property owners.

    Args:
        store (StoreAdapter): Store the users table lives in.
    """

    def __init__(self, store: StoreAdapter):
        self.store = store

    def list_all(self) -> list[User]:
        """
        Load every user in insertion order.

        Returns:
            list[User]: All users.
        """
        rows = self.store.query(select(users_table).order_by(users_table.c.id))
        return [User.from_row(row) for row in rows]

    def get(self, user_id: int) -> User:
        """
        Load one user.

        Args:
            user_id (int): User identifier.

        Raises:
            NotFoundError: If the user does not exist.

        Returns:
            User: The stored user.
        """
        rows = self.store.query(select(users_table).where(users_table.c.id == user_id))
        if not rows:
            raise NotFoundError("User", user_id)
        return User.from_row(rows[0])

    def add(self, user: User) -> User:
        """
        Persist a new user.

        Args:
            user (User): User with an unassigned id.

        Raises:
            ValidationError: If the name is empty or the id is already set.
            DuplicateEmailError: If the email is already taken.

        Returns:
            User: The user with its store-generated id.
        """
        _validate_user(user)
        if user.id != UNASSIGNED_ID:
            raise ValidationError("A new user must not carry an id")

        try:
            new_id = self.store.insert_returning_id(
                insert(users_table).values(name=user.name, email=user.email)
            )
        except ConstraintViolation as exc:
            if exc.constraint == "unique":
                raise DuplicateEmailError(user.email) from exc
            raise

        logger.info("user_added", user_id=new_id)
        return replace(user, id=new_id)

    def update(self, user: User) -> User:
        """
        Replace name and email of an existing user.

        Args:
            user (User): User carrying the id to update and its new values.

        Raises:
            ValidationError: If the name is empty.
            NotFoundError: If no user has that id.
            DuplicateEmailError: If the email belongs to another user.

        Returns:
            User: The updated user.
        """
        _validate_user(user)
        try:
            affected = self.store.execute(
                update(users_table)
                .where(users_table.c.id == user.id)
                .values(name=user.name, email=user.email)
            )
        except ConstraintViolation as exc:
            if exc.constraint == "unique":
                raise DuplicateEmailError(user.email) from exc
            raise

        if not affected:
            raise NotFoundError("User", user.id)
        logger.info("user_updated", user_id=user.id)
        return user

    def delete(self, user_id: int) -> int:
        """
        Delete a user and, as a guaranteed side effect, all its properties.

        Args:
            user_id (int): User identifier.

        Raises:
            CascadeError: If the owned properties could not be removed.

        Returns:
            int: Number of users removed (0 or 1).
        """
        return consistency.cascade_delete_user(self.store, user_id)


class PropertyRepository:
    """
    CRUD for listings. Reads resolve the owning user; writes verify it.

    Args:
        store (StoreAdapter): Store the properties table lives in.
    """

    def __init__(self, store: StoreAdapter):
        self.store = store

    def _joined_select(self):
        return select(
            properties_table,
            users_table.c.id.label("owner_ref"),
            users_table.c.name.label("owner_name"),
            users_table.c.email.label("owner_email"),
        ).select_from(
            properties_table.outerjoin(
                users_table, properties_table.c.owner_id == users_table.c.id
            )
        )

    def list_all(self) -> list[Property]:
        """
        Load every property with its owner's name and email.

        Raises:
            OrphanedPropertyError: If any property references a missing
                user. No partial result is returned.

        Returns:
            list[Property]: All properties in insertion order.
        """
        rows = self.store.query(self._joined_select().order_by(properties_table.c.id))
        orphans = {row["id"]: row["owner_id"] for row in rows if row["owner_ref"] is None}
        if orphans:
            logger.error("orphaned_properties", orphans=orphans)
            raise OrphanedPropertyError(orphans)
        return [Property.from_row(row) for row in rows]

    def get(self, property_id: int) -> Property:
        """
        Load one property with its owner.

        Args:
            property_id (int): Property identifier.

        Raises:
            NotFoundError: If the property does not exist.
            OrphanedPropertyError: If its owner is missing.

        Returns:
            Property: The stored property.
        """
        rows = self.store.query(
            self._joined_select().where(properties_table.c.id == property_id)
        )
        if not rows:
            raise NotFoundError("Property", property_id)
        row = rows[0]
        if row["owner_ref"] is None:
            raise OrphanedPropertyError({row["id"]: row["owner_id"]})
        return Property.from_row(row)

    def add(self, prop: Property) -> Property:
        """
        Persist a new property.

        Args:
            prop (Property): Property with an unassigned id.

        Raises:
            ValidationError: If size or price is invalid or the id is set.
            OwnerReferenceError: If ``owner_id`` matches no user.

        Returns:
            Property: The stored property with its id and owner details.
        """
        consistency.validate_property(prop, for_insert=True)
        try:
            with self.store.unit_of_work() as statements:
                owner = consistency.require_owner(statements, prop.owner_id)
                new_id = statements.insert_returning_id(
                    insert(properties_table).values(**prop.column_values())
                )
        except ConstraintViolation as exc:
            if exc.constraint == "foreign_key":
                raise OwnerReferenceError(prop.owner_id) from exc
            raise

        logger.info("property_added", property_id=new_id, owner_id=prop.owner_id)
        return replace(prop, id=new_id, owner_name=owner.name, owner_email=owner.email)

    def update(self, prop: Property) -> Property:
        """
        Replace every column of an existing property.

        Args:
            prop (Property): Property carrying the id to update.

        Raises:
            ValidationError: If size or price is invalid.
            OwnerReferenceError: If ``owner_id`` matches no user.
            NotFoundError: If no property has that id.

        Returns:
            Property: The updated property with its owner details.
        """
        consistency.validate_property(prop, for_insert=False)
        try:
            with self.store.unit_of_work() as statements:
                owner = consistency.require_owner(statements, prop.owner_id)
                affected = statements.execute(
                    update(properties_table)
                    .where(properties_table.c.id == prop.id)
                    .values(**prop.column_values())
                )
                if not affected:
                    raise NotFoundError("Property", prop.id)
        except ConstraintViolation as exc:
            if exc.constraint == "foreign_key":
                raise OwnerReferenceError(prop.owner_id) from exc
            raise

        logger.info("property_updated", property_id=prop.id, owner_id=prop.owner_id)
        return replace(prop, owner_name=owner.name, owner_email=owner.email)

    def delete(self, property_id: int) -> int:
        """
        Delete a property. Deleting a missing id is not an error.

        Args:
            property_id (int): Property identifier.

        Returns:
            int: Number of rows removed (0 or 1).
        """
        affected = self.store.execute(
            delete(properties_table).where(properties_table.c.id == property_id)
        )
        logger.info("property_deleted", property_id=property_id, rows=affected)
        return affected
