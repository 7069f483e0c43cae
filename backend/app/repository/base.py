"""Generic repository — one CRUD contract for every entity type.

Each mutating call commits immediately; there is no unit of work spanning
two calls. Driver errors are translated into the ``app.exceptions``
taxonomy and the session is rolled back before the error propagates.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, inspect, update
from sqlalchemy.exc import IntegrityError, InterfaceError, MultipleResultsFound, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import make_transient_to_detached
from sqlalchemy.orm.attributes import set_committed_value

from app.database import Base, utcnow
from app.exceptions import AmbiguousResult, ConstraintViolation, NotFound, StoreUnavailable
from app.repository.query import OrderBy, Predicate, build_query

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def detached_copy(entity: Any, memo: dict[int, Any] | None = None) -> Any:
    """Clone the loaded state of ``entity`` into a new detached instance.

    Loaded relationships are cloned too, so nothing in the result shares
    state with the session's identity map. Attributes that were never
    loaded stay unloaded on the clone.
    """
    memo = {} if memo is None else memo
    if id(entity) in memo:
        return memo[id(entity)]

    state = inspect(entity)
    mapper = state.mapper
    clone = mapper.class_()
    memo[id(entity)] = clone

    for attr in mapper.column_attrs:
        if attr.key in state.dict:
            set_committed_value(clone, attr.key, state.dict[attr.key])

    for relationship in mapper.relationships:
        if relationship.key not in state.dict:
            continue
        related = state.dict[relationship.key]
        if related is None:
            value = None
        elif relationship.uselist:
            value = [detached_copy(item, memo) for item in related]
        else:
            value = detached_copy(related, memo)
        set_committed_value(clone, relationship.key, value)

    make_transient_to_detached(clone)
    return clone


class Repository(Generic[ModelT]):
    """CRUD over a single mapped entity class, bound to one request's session.

    Subclasses only set ``model``::

        class VillaRepository(Repository[Villa]):
            model = Villa
    """

    model: type[ModelT]

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------

    @property
    def key_field(self) -> str:
        """Attribute name of the (single-column) primary key."""
        mapper = inspect(self.model)
        return mapper.get_property_by_column(mapper.primary_key[0]).key

    def identity(self, entity: ModelT) -> Any:
        return getattr(entity, self.key_field)

    def _column_values(self, entity: ModelT) -> dict[str, Any]:
        """Column attributes currently populated on ``entity`` (key excluded)."""
        state = inspect(entity)
        key = self.key_field
        return {
            attr.key: state.dict[attr.key]
            for attr in inspect(self.model).column_attrs
            if attr.key != key and attr.key in state.dict
        }

    @asynccontextmanager
    async def _translate_errors(self) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as exc:
            await self.db.rollback()
            logger.warning("Constraint violation on %s: %s", self.model.__name__, exc.orig)
            raise ConstraintViolation(f"{self.model.__name__} violates a uniqueness or reference constraint") from exc
        except (OperationalError, InterfaceError) as exc:
            await self.db.rollback()
            logger.error("Store unavailable while accessing %s: %s", self.model.__name__, exc.orig)
            raise StoreUnavailable("The data store is currently unavailable") from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_all(
        self,
        predicate: Predicate | None = None,
        includes: Sequence[str] | None = None,
        order_by: OrderBy | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[ModelT]:
        """Return every entity matching ``predicate`` (all entities when omitted)."""
        query = build_query(self.model, predicate, includes, order_by, skip, limit)
        async with self._translate_errors():
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def get(
        self,
        predicate: Predicate,
        includes: Sequence[str] | None = None,
        tracked: bool = True,
    ) -> ModelT | None:
        """Return the single entity matching ``predicate``, or ``None``.

        With ``tracked=False`` a detached copy is returned and any instance the
        session already tracks for that row stays attached. Changes to the copy
        are not persisted until it is passed to :meth:`update`.

        Raises:
            AmbiguousResult: more than one row matched.
        """
        query = build_query(self.model, predicate, includes)
        async with self._translate_errors():
            result = await self.db.execute(query)
            try:
                entity = result.scalar_one_or_none()
            except MultipleResultsFound as exc:
                raise AmbiguousResult(f"More than one {self.model.__name__} matched a single-result query") from exc

        if entity is not None and not tracked:
            return detached_copy(entity)
        return entity

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, entity: ModelT) -> ModelT:
        """Stamp timestamps, insert and commit. Generated keys are populated on return."""
        now = utcnow()
        entity.created_date = now  # type: ignore[attr-defined]
        entity.updated_date = now  # type: ignore[attr-defined]

        async with self._translate_errors():
            self.db.add(entity)
            await self.db.flush()
            await self.db.commit()

        logger.info("Created %s %s", self.model.__name__, self.identity(entity))
        return entity

    async def update(self, entity: ModelT) -> None:
        """Write the entity's full column state in one keyed UPDATE and commit.

        Raises:
            NotFound: no row carries the entity's identifier.
        """
        entity.updated_date = utcnow()  # type: ignore[attr-defined]
        key = self.identity(entity)
        values = self._column_values(entity)
        statement = update(self.model).where(getattr(self.model, self.key_field) == key).values(**values)

        async with self._translate_errors():
            with self.db.no_autoflush:
                result = await self.db.execute(statement)
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFound(f"{self.model.__name__} {key} not found")
            await self.db.commit()

        logger.info("Updated %s %s", self.model.__name__, key)

    async def remove(self, entity: ModelT) -> None:
        """Delete the row keyed by the entity's identifier and commit.

        Dependent rows go with it where the schema cascades. Removing an
        already-absent row is an error, not a no-op.

        Raises:
            NotFound: no row carries the entity's identifier.
        """
        key = self.identity(entity)
        statement = delete(self.model).where(getattr(self.model, self.key_field) == key)

        async with self._translate_errors():
            with self.db.no_autoflush:
                result = await self.db.execute(statement)
            if result.rowcount == 0:
                await self.db.rollback()
                raise NotFound(f"{self.model.__name__} {key} not found")
            await self.db.commit()

        logger.info("Removed %s %s", self.model.__name__, key)

    async def save(self) -> None:
        """Commit in-place mutations made on tracked handles."""
        async with self._translate_errors():
            await self.db.commit()
