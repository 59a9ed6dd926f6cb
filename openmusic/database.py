import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional, Sequence

from sqlalchemy import Table, delete, func, insert, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from openmusic.exceptions import ConstraintViolation, StoreFailure

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

_CONSTRAINT_RE = re.compile(r'constraint "([^"]+)"')


class Contains:
    """Case-insensitive substring match for a ``where`` mapping value."""

    def __init__(self, text: str):
        self.text = text

    def matches(self, value: Any) -> bool:
        return value is not None and self.text.lower() in str(value).lower()


def _classify(exc: IntegrityError) -> Exception:
    """Turn a driver integrity error into ConstraintViolation, or StoreFailure if unknown."""
    orig = exc.orig
    cause = getattr(orig, "__cause__", None)

    constraint = getattr(orig, "constraint_name", None) or getattr(cause, "constraint_name", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(cause, "sqlstate", None)
    message = str(orig)
    if constraint is None:
        match = _CONSTRAINT_RE.search(message)
        if match:
            constraint = match.group(1)

    lowered = message.lower()
    if sqlstate == UNIQUE_VIOLATION or (sqlstate is None and "unique" in lowered):
        return ConstraintViolation(constraint, ConstraintViolation.UNIQUE)
    if sqlstate == FOREIGN_KEY_VIOLATION or (sqlstate is None and "foreign key" in lowered):
        return ConstraintViolation(constraint, ConstraintViolation.FOREIGN_KEY)
    return StoreFailure(f"Integrity error: {message}")


class Store:
    """Durable store adapter over an async SQLAlchemy engine.

    Every call runs in its own short transaction; use :meth:`transaction`
    to group several writes into one. Predicates are plain
    mappings of column name to value: a list, tuple or set value means
    ``IN``, a :class:`Contains` value means a case-insensitive substring
    match, anything else means equality.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "Store":
        engine = create_async_engine(
            database_url,
            echo=echo,
            pool_size=20,
            max_overflow=10,
            pool_pre_ping=True,
        )
        return cls(engine)

    async def create_all(self) -> None:
        """Create tables (development only)"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    # ----- Internals -----

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise StoreFailure(f"Unknown table: {name}")

    def _criteria(self, table: Table, where: Optional[Mapping[str, Any]]) -> list:
        clauses = []
        for name, value in (where or {}).items():
            column = table.c[name]
            if isinstance(value, Contains):
                clauses.append(column.ilike(f"%{value.text}%"))
            elif isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        return clauses

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["Transaction"]:
        """
        Unit of work: every call on the yielded Transaction shares one
        session and commits together. Any error rolls all of them back.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield Transaction(self, session)
        except IntegrityError as exc:
            classified = _classify(exc)
            if isinstance(classified, StoreFailure):
                logger.error(f"Unclassified integrity error: {exc.orig}")
            raise classified from exc
        except SQLAlchemyError as exc:
            logger.error(f"Store operation failed: {exc}")
            raise StoreFailure(str(exc)) from exc

    # ----- Operations (one transaction each) -----

    async def insert(self, table: str, values: Mapping[str, Any]) -> Any:
        """Insert one row and return its id."""
        async with self.transaction() as tx:
            return await tx.insert(table, values)

    async def update(self, table: str, values: Mapping[str, Any], where: Mapping[str, Any]) -> int:
        async with self.transaction() as tx:
            return await tx.update(table, values, where)

    async def delete(self, table: str, where: Mapping[str, Any]) -> int:
        """Delete matching rows and return the affected count."""
        async with self.transaction() as tx:
            return await tx.delete(table, where)

    async def count(self, table: str, where: Mapping[str, Any]) -> int:
        async with self.transaction() as tx:
            return await tx.count(table, where)

    async def select(
        self,
        table: str,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> list[dict]:
        async with self.transaction() as tx:
            return await tx.select(table, where, order_by)


class Transaction:
    """Store operations bound to a single open session."""

    def __init__(self, store: Store, session: AsyncSession):
        self.store = store
        self.session = session

    async def insert(self, table: str, values: Mapping[str, Any]) -> Any:
        target = self.store._table(table)
        stmt = insert(target).values(**values).returning(target.c.id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def update(self, table: str, values: Mapping[str, Any], where: Mapping[str, Any]) -> int:
        target = self.store._table(table)
        stmt = update(target).where(*self.store._criteria(target, where)).values(**values)
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete(self, table: str, where: Mapping[str, Any]) -> int:
        target = self.store._table(table)
        stmt = delete(target).where(*self.store._criteria(target, where))
        result = await self.session.execute(stmt)
        return result.rowcount

    async def count(self, table: str, where: Mapping[str, Any]) -> int:
        target = self.store._table(table)
        stmt = select(func.count()).select_from(target).where(*self.store._criteria(target, where))
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def select(
        self,
        table: str,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> list[dict]:
        target = self.store._table(table)
        stmt = select(target).where(*self.store._criteria(target, where))
        if order_by:
            stmt = stmt.order_by(*(target.c[name] for name in order_by))
        result = await self.session.execute(stmt)
        return [dict(row._mapping) for row in result.fetchall()]
