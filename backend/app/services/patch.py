"""Patch pipeline — sparse field operations merged into a validated full update.

Stages::

    LOADED ──merge ok──▶ MERGED ──▶ PERSISTED
       │                   │
       └──────────▶ REJECTED ◀┘  (not found, sentinel id, validation errors)

The entity is loaded untracked so that mutating the working copy can never
be flushed behind the explicit ``Repository.update`` call. A successful
merge is not undone if persistence fails afterwards; the repository error
propagates as-is.
"""

import enum
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from app.database import Base
from app.exceptions import PatchRejected
from app.repository.base import Repository
from app.schemas.patch import PatchOperation

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

BeforePersist = Callable[[ModelT], Awaitable[None]]


class PatchStage(str, enum.Enum):
    PENDING = "pending"
    LOADED = "loaded"
    MERGED = "merged"
    PERSISTED = "persisted"
    REJECTED = "rejected"


def _validation_messages(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


class PatchPipeline(Generic[ModelT]):
    """Apply an ordered list of :class:`PatchOperation` to one entity.

    ``view_schema`` is the transport-shaped partial view the operations are
    addressed against (e.g. ``VillaUpdate``); it must enable
    ``validate_assignment`` so each operation is checked as it is applied.
    ``before_persist`` runs between MERGED and the repository write, for
    cross-entity checks.
    """

    def __init__(
        self,
        repository: Repository[ModelT],
        view_schema: type[BaseModel],
        before_persist: BeforePersist | None = None,
    ) -> None:
        self.repository = repository
        self.view_schema = view_schema
        self.before_persist = before_persist
        self.stage = PatchStage.PENDING
        self.errors: list[str] = []

    def _reject(self, errors: list[str]) -> PatchRejected:
        self.stage = PatchStage.REJECTED
        self.errors = errors
        logger.warning(
            "Rejected patch for %s: %s",
            self.repository.model.__name__,
            "; ".join(errors),
        )
        return PatchRejected(errors)

    async def load(self, identifier: int) -> ModelT:
        name = self.repository.model.__name__
        if not identifier or identifier <= 0:
            raise self._reject([f"{name} identifier must be a positive integer"])

        key_field = self.repository.key_field
        entity = await self.repository.get(
            lambda model: getattr(model, key_field) == identifier,
            tracked=False,
        )
        if entity is None:
            raise self._reject([f"{name} {identifier} not found"])

        self.stage = PatchStage.LOADED
        return entity

    def merge(self, entity: ModelT, operations: Sequence[PatchOperation]) -> BaseModel:
        """Apply ``operations`` to a partial view of ``entity``, collecting every violation."""
        try:
            view = self.view_schema.model_validate(entity, from_attributes=True)
        except ValidationError as exc:
            raise self._reject(_validation_messages(exc)) from exc

        key_field = self.repository.key_field
        identifier = self.repository.identity(entity)
        fields = self.view_schema.model_fields
        errors: list[str] = []

        for operation in operations:
            field = operation.field
            if field not in fields:
                errors.append(f"The target location specified by path '{operation.path}' was not found")
                continue

            value = None if operation.op == "remove" else operation.value
            if field == key_field:
                # Compare in the field's own type so "1" and 1 name the same row.
                try:
                    value = TypeAdapter(fields[field].annotation).validate_python(value)
                except ValidationError as exc:
                    errors.extend(f"{field}: {message}" for message in _validation_messages(exc))
                    continue
                if value != identifier:
                    errors.append(f"{field}: the identifier cannot be changed")
                    continue

            try:
                setattr(view, field, value)
            except ValidationError as exc:
                errors.extend(_validation_messages(exc))

        # Model-level revalidation of the merged view as a whole.
        try:
            view = self.view_schema.model_validate(view.model_dump())
        except ValidationError as exc:
            errors.extend(message for message in _validation_messages(exc) if message not in errors)

        if errors:
            raise self._reject(errors)

        self.stage = PatchStage.MERGED
        return view

    async def persist(self, entity: ModelT, view: BaseModel) -> ModelT:
        # Fields absent from the entity are ignored.
        for field, value in view.model_dump().items():
            if hasattr(entity, field):
                setattr(entity, field, value)

        if self.before_persist is not None:
            await self.before_persist(entity)

        await self.repository.update(entity)
        self.stage = PatchStage.PERSISTED
        return entity

    async def run(self, identifier: int, operations: Sequence[PatchOperation]) -> ModelT:
        """Load, merge and persist. Raises :class:`PatchRejected` on any validation failure."""
        entity = await self.load(identifier)
        view = self.merge(entity, operations)
        return await self.persist(entity, view)
