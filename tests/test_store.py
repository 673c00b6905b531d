import pytest
from sqlalchemy import inspect, insert, select, text

from estate_manager.errors import ConstraintViolation, StoreError
from estate_manager.models import Property, User, users_table
from estate_manager.store import StoreAdapter


def test_insert_returning_id_and_query(store):
    first = store.insert_returning_id(
        insert(users_table).values(name="Jane Smith", email="jane@example.com")
    )
    second = store.insert_returning_id(
        insert(users_table).values(name="Paul Brown", email="paul@example.com")
    )
    assert second > first > 0

    rows = store.query(select(users_table).order_by(users_table.c.id))
    assert [row["name"] for row in rows] == ["Jane Smith", "Paul Brown"]


def test_text_statement_with_params(store):
    new_id = store.insert_returning_id(
        text("INSERT INTO users (name, email) VALUES (:name, :email)"),
        {"name": "Jane Smith", "email": "jane@example.com"},
    )
    rows = store.query(text("SELECT name FROM users WHERE id = :id"), {"id": new_id})
    assert rows[0]["name"] == "Jane Smith"


def test_execute_reports_rows_affected(store):
    store.execute(insert(users_table).values(name="A", email="a@example.com"))
    store.execute(insert(users_table).values(name="B", email="b@example.com"))

    affected = store.execute(text("UPDATE users SET name = 'Z'"))
    assert affected == 2
    assert store.execute(text("DELETE FROM users WHERE id = -1")) == 0


def test_unique_violation_is_classified(store):
    store.execute(insert(users_table).values(name="A", email="same@example.com"))
    with pytest.raises(ConstraintViolation) as exc_info:
        store.execute(insert(users_table).values(name="B", email="same@example.com"))
    assert exc_info.value.constraint == "unique"


def test_foreign_key_violation_is_classified(store):
    with pytest.raises(ConstraintViolation) as exc_info:
        store.execute(
            text(
                "INSERT INTO properties (owner_id, description, location, size, price) "
                "VALUES (404, '', 'Nowhere', 1, 1)"
            )
        )
    assert exc_info.value.constraint == "foreign_key"


def test_driver_failure_is_wrapped(store):
    with pytest.raises(StoreError) as exc_info:
        store.query(text("SELECT * FROM no_such_table"))
    assert not isinstance(exc_info.value, ConstraintViolation)
    assert exc_info.value.__cause__ is not None


def test_unit_of_work_rolls_back_on_error(store):
    with pytest.raises(RuntimeError):
        with store.unit_of_work() as statements:
            statements.execute(insert(users_table).values(name="A", email="a@example.com"))
            raise RuntimeError("boom")

    assert store.query(select(users_table)) == []


def test_connection_is_released_after_failure(tmp_path):
    from sqlalchemy import create_engine

    file_engine = create_engine(f"sqlite:///{tmp_path / 'store.db'}")
    adapter = StoreAdapter(file_engine)
    try:
        with pytest.raises(StoreError):
            adapter.query(text("SELECT * FROM no_such_table"))
        assert file_engine.pool.checkedout() == 0

        adapter.execute(text("CREATE TABLE t (x INTEGER)"))
        assert adapter.execute(text("INSERT INTO t (x) VALUES (1)")) == 1
        assert file_engine.pool.checkedout() == 0
    finally:
        file_engine.dispose()


def test_models_map_plain_tables_only():
    assert not inspect(User).relationships
    assert not inspect(Property).relationships
    assert [fk.ondelete for fk in Property.__table__.c.owner_id.foreign_keys] == ["CASCADE"]
