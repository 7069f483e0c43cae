"""Villa service — business rules around the generic repository."""

import logging
from collections.abc import Sequence

from sqlalchemy import func

from app.exceptions import ConstraintViolation, NotFound
from app.models.villa import Villa
from app.repository.villa import VillaRepository
from app.schemas.patch import PatchOperation
from app.schemas.villa import VillaCreate, VillaUpdate
from app.services.patch import PatchPipeline

logger = logging.getLogger(__name__)


async def ensure_name_available(repo: VillaRepository, name: str, villa_id: int | None = None) -> None:
    """Raise ConstraintViolation if another villa already uses ``name`` (case-insensitive).

    The ``lower(name)`` unique index catches the race between two concurrent
    writers; the loser surfaces as a ConstraintViolation too.
    """
    predicate = func.lower(Villa.name) == name.lower()
    if villa_id is not None:
        predicate = predicate & (Villa.id != villa_id)

    if await repo.get(predicate) is not None:
        logger.warning("Rejected duplicate villa name %r", name)
        raise ConstraintViolation("Villa already exists")


async def list_villas(repo: VillaRepository) -> list[Villa]:
    """Return all villas ordered by id."""
    return await repo.get_all(order_by=Villa.id)


async def get_villa(repo: VillaRepository, villa_id: int) -> Villa:
    """Return a villa or raise NotFound."""
    villa = await repo.get(Villa.id == villa_id)
    if villa is None:
        raise NotFound(f"Villa {villa_id} not found")
    return villa


async def create_villa(repo: VillaRepository, body: VillaCreate) -> Villa:
    """Create a villa after a case-insensitive duplicate-name check."""
    await ensure_name_available(repo, body.name)
    return await repo.create(Villa(**body.model_dump()))


async def update_villa(repo: VillaRepository, villa_id: int, body: VillaUpdate) -> None:
    """Replace a villa's state. The body must target the same id as the path."""
    if villa_id != body.id:
        raise ConstraintViolation("Villa id in the body does not match the route")

    await ensure_name_available(repo, body.name, villa_id)
    await repo.update(Villa(**body.model_dump()))


async def patch_villa(
    repo: VillaRepository, villa_id: int, operations: Sequence[PatchOperation]
) -> Villa:
    """Apply a partial update to a villa through the patch pipeline."""

    async def check_name(villa: Villa) -> None:
        await ensure_name_available(repo, villa.name, villa.id)

    pipeline = PatchPipeline(repo, VillaUpdate, before_persist=check_name)
    return await pipeline.run(villa_id, operations)


async def delete_villa(repo: VillaRepository, villa_id: int) -> None:
    """Delete a villa and, through the store's cascade, its villa numbers."""
    villa = await get_villa(repo, villa_id)
    await repo.remove(villa)
