"""Database models for the real estate manager.

This module defines the SQLAlchemy tables backing users and properties.
Repositories work against these tables through SQLAlchemy Core statements;
no ORM relationships are mapped, so the only cascade is the foreign key's
``ON DELETE CASCADE`` plus the explicit delete in ``consistency``.
"""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text

from .database import Base


class User(Base):
    """
    SQLAlchemy model representing a property owner.

    A user can own multiple properties; removing the user removes them too.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)


class Property(Base):
    """
    SQLAlchemy model representing a real-estate listing.

    Each property belongs to exactly one user.
    """

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(Text, nullable=False, default="")
    location = Column(String(100), nullable=False, default="")
    size = Column(Float, nullable=False, default=0.0)
    price = Column(Float, nullable=False, default=0.0)

    #: Identifier of the owning user
    owner_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


users_table = User.__table__
properties_table = Property.__table__
