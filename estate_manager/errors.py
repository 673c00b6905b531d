"""Error taxonomy for the real estate manager.

Every failure raised by the repositories, the consistency checks and the
coordinator derives from :class:`EstateError`, so callers can catch the
whole family at once or react to a precise case.
"""


class EstateError(Exception):
    """Base class for all domain errors."""


class ValidationError(EstateError):
    """Input rejected before any store call."""


class DuplicateEmailError(EstateError):
    """A user with the same email already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A user with email {email!r} already exists")


class OwnerReferenceError(EstateError):
    """A property points at a user that does not exist."""

    def __init__(self, owner_id: int):
        self.owner_id = owner_id
        super().__init__(f"Owner {owner_id} does not exist")


class NotFoundError(EstateError):
    """The update or lookup target does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class CascadeError(EstateError):
    """Removing a user's properties failed or left rows behind.

    Attributes:
        user_id: The user being deleted.
        dangling: Properties still referencing ``user_id`` after commit.
        inconsistent: True when the store was left violating the
            no-orphan invariant and needs attention.
    """

    def __init__(self, user_id: int, *, dangling: int = 0, inconsistent: bool = False):
        self.user_id = user_id
        self.dangling = dangling
        self.inconsistent = inconsistent
        if inconsistent:
            message = (
                f"User {user_id} was deleted but {dangling} properties "
                "still reference it"
            )
        else:
            message = f"Could not delete properties of user {user_id}; nothing was changed"
        super().__init__(message)


class StoreError(EstateError):
    """The store operation did not complete."""


class ConstraintViolation(StoreError):
    """The store rejected a write because of an integrity constraint.

    ``constraint`` is one of ``"unique"``, ``"foreign_key"`` or ``"other"``.
    """

    def __init__(self, message: str, constraint: str = "other"):
        self.constraint = constraint
        super().__init__(message)


class OrphanedPropertyError(StoreError):
    """Properties were read whose owner no longer exists."""

    def __init__(self, orphans: dict[int, int]):
        #: property id -> missing owner id
        self.orphans = orphans
        listed = ", ".join(
            f"property {pid} (owner {oid})" for pid, oid in sorted(orphans.items())
        )
        super().__init__(f"Orphaned properties found: {listed}")


class RefreshError(StoreError):
    """One or more collections could not be reloaded.

    ``failures`` maps the collection name (``"users"``/``"properties"``)
    to the error raised while loading it.
    """

    def __init__(self, failures: dict[str, StoreError]):
        self.failures = failures
        listed = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
        super().__init__(f"Refresh failed for {listed}")


class StaleViewError(RefreshError):
    """A mutation was committed but the reload that follows it failed.

    ``committed`` holds the mutation's result (the created or updated
    entity, or the number of rows removed). The write must not be retried.
    """

    def __init__(self, failures: dict[str, StoreError], committed: object):
        self.committed = committed
        super().__init__(failures)
