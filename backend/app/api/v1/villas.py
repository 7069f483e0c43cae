"""Villa CRUD API routes."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from app.api.deps import get_villa_repository
from app.repository.villa import VillaRepository
from app.schemas.patch import PatchOperation
from app.schemas.response import APIResponse
from app.schemas.villa import VillaCreate, VillaResponse, VillaUpdate
from app.services import villa_service

router = APIRouter(prefix="/api/v1/villas", tags=["villas"])


def _bad_id() -> JSONResponse:
    body = APIResponse.failure(status.HTTP_400_BAD_REQUEST, ["Villa id must be a positive integer"])
    return JSONResponse(status_code=body.status_code, content=body.model_dump(mode="json"))


@router.get(
    "",
    response_model=APIResponse,
    summary="List all villas",
)
async def list_villas(repo: VillaRepository = Depends(get_villa_repository)) -> APIResponse:
    villas = await villa_service.list_villas(repo)
    return APIResponse.ok([VillaResponse.model_validate(v) for v in villas])


@router.get(
    "/{villa_id}",
    name="get_villa",
    response_model=APIResponse,
    summary="Get a villa by ID",
)
async def get_villa(
    villa_id: int,
    repo: VillaRepository = Depends(get_villa_repository),
) -> APIResponse | JSONResponse:
    """Retrieve a single villa. 400 for a zero/negative id, 404 if absent."""
    if villa_id <= 0:
        return _bad_id()
    villa = await villa_service.get_villa(repo, villa_id)
    return APIResponse.ok(VillaResponse.model_validate(villa))


@router.post(
    "",
    response_model=APIResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new villa",
)
async def create_villa(
    body: VillaCreate,
    request: Request,
    response: Response,
    repo: VillaRepository = Depends(get_villa_repository),
) -> APIResponse:
    """Create a villa. Names are unique regardless of letter case."""
    villa = await villa_service.create_villa(repo, body)
    response.headers["Location"] = str(request.url_for("get_villa", villa_id=villa.id))
    return APIResponse.ok(VillaResponse.model_validate(villa), status.HTTP_201_CREATED)


@router.put(
    "/{villa_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Replace a villa",
)
async def update_villa(
    villa_id: int,
    body: VillaUpdate,
    repo: VillaRepository = Depends(get_villa_repository),
) -> Response:
    await villa_service.update_villa(repo, villa_id, body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{villa_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Partially update a villa",
)
async def patch_villa(
    villa_id: int,
    operations: list[PatchOperation],
    repo: VillaRepository = Depends(get_villa_repository),
) -> Response:
    """Apply JSON-Patch style operations, e.g. ``[{"op": "replace", "path": "/name", "value": "x"}]``."""
    await villa_service.patch_villa(repo, villa_id, operations)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{villa_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a villa",
)
async def delete_villa(
    villa_id: int,
    repo: VillaRepository = Depends(get_villa_repository),
) -> Response:
    """Delete a villa and cascade-delete its villa numbers."""
    if villa_id <= 0:
        return _bad_id()
    await villa_service.delete_villa(repo, villa_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
