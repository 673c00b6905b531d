"""Persistent store adapter.

Thin wrapper around a SQLAlchemy engine. Every call checks a connection out
of the pool, runs one statement inside its own transaction and gives the
connection back, whether the statement succeeded or not. Multi-statement
operations go through :meth:`StoreAdapter.unit_of_work`.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Sequence

from sqlalchemy.engine import Connection, Engine, RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import Executable

from .errors import ConstraintViolation, StoreError
from .logging import get_logger

logger = get_logger(__name__)

Params = Mapping[str, Any] | None


def classify_integrity_error(exc: IntegrityError) -> str:
    """
    Tell unique violations apart from foreign key violations.

    Drivers report constraint failures as free text, so the message of the
    underlying DBAPI error is inspected.

    Args:
        exc (IntegrityError): Error raised by SQLAlchemy.

    Returns:
        str: ``"unique"``, ``"foreign_key"`` or ``"other"``.
    """
    message = str(exc.orig).lower()
    if "unique" in message or "duplicate" in message:
        return "unique"
    if "foreign key" in message:
        return "foreign_key"
    return "other"


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        constraint = classify_integrity_error(exc)
        logger.warning("store_constraint_violation", operation=operation, constraint=constraint)
        raise ConstraintViolation(str(exc.orig), constraint=constraint) from exc
    except SQLAlchemyError as exc:
        logger.error("store_operation_failed", operation=operation, error=str(exc))
        raise StoreError(f"Store operation '{operation}' did not complete") from exc


class BoundStatements:
    """Statement runner tied to one open connection.

    Returned by :meth:`StoreAdapter.unit_of_work`; all calls share the
    transaction of that unit.
    """

    def __init__(self, connection: Connection):
        self._connection = connection

    def execute(self, statement: Executable, params: Params = None) -> int:
        with _translate_errors("execute"):
            return self._connection.execute(statement, params).rowcount

    def query(self, statement: Executable, params: Params = None) -> Sequence[RowMapping]:
        with _translate_errors("query"):
            return self._connection.execute(statement, params).mappings().all()

    def insert_returning_id(self, statement: Executable, params: Params = None) -> int:
        with _translate_errors("insert"):
            result = self._connection.execute(statement, params)
            if result.is_insert and result.inserted_primary_key:
                return int(result.inserted_primary_key[0])
            return int(result.lastrowid)


class StoreAdapter:
    """Runs parameterized statements against the backing database.

    Args:
        engine (Engine): Engine connections are acquired from.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def unit_of_work(self) -> Iterator[BoundStatements]:
        """
        Run several statements on one connection and one transaction.

        The transaction commits when the block exits normally and rolls
        back on any exception; the connection is released in both cases.

        Yields:
            BoundStatements: Runner sharing the open transaction.

        Raises:
            StoreError: If the connection, a statement or the commit fails.
        """
        with _translate_errors("transaction"):
            with self.engine.begin() as connection:
                yield BoundStatements(connection)

    def execute(self, statement: Executable, params: Params = None) -> int:
        """
        Execute a write statement.

        Args:
            statement (Executable): Statement to run.
            params (Mapping | None): Bound parameters.

        Returns:
            int: Number of rows affected.
        """
        with self.unit_of_work() as statements:
            return statements.execute(statement, params)

    def query(self, statement: Executable, params: Params = None) -> Sequence[RowMapping]:
        """
        Execute a read statement.

        Args:
            statement (Executable): Statement to run.
            params (Mapping | None): Bound parameters.

        Returns:
            Sequence[RowMapping]: All result rows as mappings.
        """
        with self.unit_of_work() as statements:
            rows = statements.query(statement, params)
        logger.debug("store_query", rows=len(rows))
        return rows

    def insert_returning_id(self, statement: Executable, params: Params = None) -> int:
        """
        Execute an insert and return the generated primary key.

        Args:
            statement (Executable): Insert statement to run.
            params (Mapping | None): Bound parameters.

        Returns:
            int: Store-generated id of the new row.
        """
        with self.unit_of_work() as statements:
            return statements.insert_returning_id(statement, params)
