"""VillaNumber service — parent-reference and key rules around the repository."""

import logging
from collections.abc import Sequence

from app.exceptions import ConstraintViolation, NotFound
from app.models.villa import Villa
from app.models.villa_number import VillaNumber
from app.repository.villa import VillaRepository
from app.repository.villa_number import VillaNumberRepository
from app.schemas.patch import PatchOperation
from app.schemas.villa_number import VillaNumberCreate, VillaNumberUpdate
from app.services.patch import PatchPipeline

logger = logging.getLogger(__name__)

PARENT_INVALID = "parent reference is invalid"


async def ensure_parent_exists(villa_repo: VillaRepository, villa_id: int) -> None:
    """Raise ConstraintViolation unless ``villa_id`` resolves to a villa.

    The foreign key on ``villa_numbers.villa_id`` is the store-level safety
    net; this check gives callers a readable error first.
    """
    if await villa_repo.get(Villa.id == villa_id) is None:
        logger.warning("Villa number references missing villa %s", villa_id)
        raise ConstraintViolation(PARENT_INVALID)


async def list_villa_numbers(repo: VillaNumberRepository) -> list[VillaNumber]:
    """Return all villa numbers with their parent villa, ordered by number."""
    return await repo.get_all(includes=["villa"], order_by=VillaNumber.villa_no)


async def get_villa_number(repo: VillaNumberRepository, villa_no: int) -> VillaNumber:
    """Return a villa number (parent included) or raise NotFound."""
    villa_number = await repo.get(VillaNumber.villa_no == villa_no, includes=["villa"])
    if villa_number is None:
        raise NotFound(f"Villa number {villa_no} not found")
    return villa_number


async def create_villa_number(
    repo: VillaNumberRepository, villa_repo: VillaRepository, body: VillaNumberCreate
) -> VillaNumber:
    """Create a villa number under an existing villa, keeping the caller's number."""
    if await repo.get(VillaNumber.villa_no == body.villa_no) is not None:
        raise ConstraintViolation("Villa number already exists")
    await ensure_parent_exists(villa_repo, body.villa_id)

    return await repo.create(VillaNumber(**body.model_dump()))


async def update_villa_number(
    repo: VillaNumberRepository,
    villa_repo: VillaRepository,
    villa_no: int,
    body: VillaNumberUpdate,
) -> None:
    """Replace a villa number's state. The number itself cannot change."""
    if villa_no != body.villa_no:
        raise ConstraintViolation("Villa number in the body does not match the route")
    await ensure_parent_exists(villa_repo, body.villa_id)

    await repo.update(VillaNumber(**body.model_dump()))


async def patch_villa_number(
    repo: VillaNumberRepository,
    villa_repo: VillaRepository,
    villa_no: int,
    operations: Sequence[PatchOperation],
) -> VillaNumber:
    """Apply a partial update; the (possibly new) parent is checked before the write."""

    async def check_parent(villa_number: VillaNumber) -> None:
        await ensure_parent_exists(villa_repo, villa_number.villa_id)

    pipeline = PatchPipeline(repo, VillaNumberUpdate, before_persist=check_parent)
    return await pipeline.run(villa_no, operations)


async def delete_villa_number(repo: VillaNumberRepository, villa_no: int) -> None:
    villa_number = await repo.get(VillaNumber.villa_no == villa_no)
    if villa_number is None:
        raise NotFound(f"Villa number {villa_no} not found")
    await repo.remove(villa_number)
