"""Plain value objects passed between the store, the view and callers."""

from dataclasses import dataclass
from typing import Any, Mapping

#: Id carried by entities that have not been persisted yet.
UNASSIGNED_ID = 0


@dataclass(frozen=True)
class User:
    """Immutable snapshot of a property owner."""

    name: str
    email: str
    id: int = UNASSIGNED_ID

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        """
        Build a User from a ``users`` table row.

        Args:
            row (Mapping): Row mapping with ``id``, ``name`` and ``email``.

        Returns:
            User: Snapshot of the row.
        """
        return cls(id=row["id"], name=row["name"], email=row["email"])

    def __str__(self) -> str:
        return f"{self.name} ({self.email})"


@dataclass(frozen=True)
class Property:
    """Immutable snapshot of a listing.

    ``owner_name`` and ``owner_email`` are filled on read from the owning
    user and are never written back; ``owner_id`` is what gets stored.
    """

    owner_id: int
    location: str
    size: float
    price: float
    description: str = ""
    id: int = UNASSIGNED_ID
    owner_name: str | None = None
    owner_email: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Property":
        """
        Build a Property from a joined ``properties``/``users`` row.

        Args:
            row (Mapping): Row mapping with the property columns and,
                optionally, ``owner_name`` and ``owner_email``.

        Returns:
            Property: Snapshot of the row.
        """
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            description=row["description"] or "",
            location=row["location"] or "",
            size=float(row["size"]),
            price=float(row["price"]),
            owner_name=row.get("owner_name"),
            owner_email=row.get("owner_email"),
        )

    def column_values(self) -> dict[str, Any]:
        """Values written to the ``properties`` table (no id, no owner copy)."""
        return {
            "owner_id": self.owner_id,
            "description": self.description,
            "location": self.location,
            "size": self.size,
            "price": self.price,
        }
