import pytest
from sqlalchemy import create_engine, insert
from sqlalchemy.pool import StaticPool

from estate_manager import consistency
from estate_manager.database import Base, create_tables
from estate_manager.entities import Property, User
from estate_manager.errors import CascadeError, StoreError, ValidationError
from estate_manager.models import properties_table, users_table
from estate_manager.repositories import PropertyRepository, UserRepository
from estate_manager.store import StoreAdapter


@pytest.fixture()
def lax_store():
    """Store whose backend neither checks nor cascades foreign keys."""
    lax_engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(lax_engine)
    yield StoreAdapter(lax_engine)
    Base.metadata.drop_all(bind=lax_engine)
    lax_engine.dispose()


def add_listings(repo, owner_id, count):
    return [
        repo.add(Property(owner_id=owner_id, location=f"Street {n}", size=50 + n, price=1000 * n))
        for n in range(count)
    ]


@pytest.mark.parametrize("store_fixture", ["store", "lax_store"])
def test_deleting_user_leaves_no_properties(request, store_fixture):
    store = request.getfixturevalue(store_fixture)
    users = UserRepository(store)
    properties = PropertyRepository(store)
    doomed = users.add(User(name="John Doe", email="john@x.com"))
    other = users.add(User(name="Jane Smith", email="jane@x.com"))
    add_listings(properties, doomed.id, 3)
    survivors = add_listings(properties, other.id, 2)

    assert users.delete(doomed.id) == 1

    assert consistency.count_dangling_properties(store) == 0
    assert all(p.owner_id != doomed.id for p in properties.list_all())
    assert properties.list_all() == survivors


def test_count_dangling_properties(lax_store):
    owner_id = lax_store.insert_returning_id(
        insert(users_table).values(name="John Doe", email="john@x.com")
    )
    for owner in (owner_id, 50, 50, 60):
        lax_store.execute(
            insert(properties_table).values(
                owner_id=owner, description="", location="X", size=1, price=1
            )
        )

    assert consistency.count_dangling_properties(lax_store) == 3
    assert consistency.count_dangling_properties(lax_store, 50) == 2
    assert consistency.count_dangling_properties(lax_store, owner_id) == 0


def test_failed_dependent_delete_changes_nothing(store, monkeypatch):
    users = UserRepository(store)
    properties = PropertyRepository(store)
    john = users.add(User(name="John Doe", email="john@x.com"))
    listings = add_listings(properties, john.id, 2)

    def broken(statements, user_id):
        raise StoreError("disk I/O error")

    monkeypatch.setattr(consistency, "_delete_dependents", broken)

    with pytest.raises(CascadeError) as exc_info:
        users.delete(john.id)
    assert exc_info.value.inconsistent is False
    assert users.list_all() == [john]
    assert properties.list_all() == listings


def test_dangling_rows_after_commit_are_surfaced(store, monkeypatch):
    users = UserRepository(store)
    john = users.add(User(name="John Doe", email="john@x.com"))

    monkeypatch.setattr(consistency, "count_dangling_properties", lambda s, user_id=None: 2)

    with pytest.raises(CascadeError) as exc_info:
        users.delete(john.id)
    assert exc_info.value.inconsistent is True
    assert exc_info.value.dangling == 2
    assert exc_info.value.user_id == john.id


def test_require_owner_inside_unit_of_work(store):
    john = UserRepository(store).add(User(name="John Doe", email="john@x.com"))
    with store.unit_of_work() as statements:
        assert consistency.require_owner(statements, john.id) == john


@pytest.mark.parametrize(
    "prop, for_insert",
    [
        (Property(id=3, owner_id=1, location="X", size=1, price=1), True),
        (Property(owner_id=1, location="X", size=1, price=1), False),
        (Property(owner_id=1, location="X", size="12", price=1), True),
        (Property(owner_id=1, location="X", size=True, price=1), True),
    ],
)
def test_validate_property_rejects(prop, for_insert):
    with pytest.raises(ValidationError):
        consistency.validate_property(prop, for_insert=for_insert)
