"""VillaNumber CRUD API routes."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from app.api.deps import get_villa_number_repository, get_villa_repository
from app.repository.villa import VillaRepository
from app.repository.villa_number import VillaNumberRepository
from app.schemas.patch import PatchOperation
from app.schemas.response import APIResponse
from app.schemas.villa_number import VillaNumberCreate, VillaNumberResponse, VillaNumberUpdate
from app.services import villa_number_service

router = APIRouter(prefix="/api/v1/villa-numbers", tags=["villa-numbers"])


def _bad_number() -> JSONResponse:
    body = APIResponse.failure(status.HTTP_400_BAD_REQUEST, ["Villa number must be a positive integer"])
    return JSONResponse(status_code=body.status_code, content=body.model_dump(mode="json"))


@router.get(
    "",
    response_model=APIResponse,
    summary="List all villa numbers",
)
async def list_villa_numbers(
    repo: VillaNumberRepository = Depends(get_villa_number_repository),
) -> APIResponse:
    """Return every villa number with its parent villa embedded."""
    villa_numbers = await villa_number_service.list_villa_numbers(repo)
    return APIResponse.ok([VillaNumberResponse.from_entity(vn) for vn in villa_numbers])


@router.get(
    "/{villa_no}",
    name="get_villa_number",
    response_model=APIResponse,
    summary="Get a villa number",
)
async def get_villa_number(
    villa_no: int,
    repo: VillaNumberRepository = Depends(get_villa_number_repository),
) -> APIResponse | JSONResponse:
    if villa_no <= 0:
        return _bad_number()
    villa_number = await villa_number_service.get_villa_number(repo, villa_no)
    return APIResponse.ok(VillaNumberResponse.from_entity(villa_number))


@router.post(
    "",
    response_model=APIResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a villa number",
)
async def create_villa_number(
    body: VillaNumberCreate,
    request: Request,
    response: Response,
    repo: VillaNumberRepository = Depends(get_villa_number_repository),
    villa_repo: VillaRepository = Depends(get_villa_repository),
) -> APIResponse:
    """Create a villa number under an existing villa. 400 if the villa does not exist."""
    villa_number = await villa_number_service.create_villa_number(repo, villa_repo, body)
    response.headers["Location"] = str(request.url_for("get_villa_number", villa_no=villa_number.villa_no))
    return APIResponse.ok(VillaNumberResponse.from_entity(villa_number), status.HTTP_201_CREATED)


@router.put(
    "/{villa_no}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Replace a villa number",
)
async def update_villa_number(
    villa_no: int,
    body: VillaNumberUpdate,
    repo: VillaNumberRepository = Depends(get_villa_number_repository),
    villa_repo: VillaRepository = Depends(get_villa_repository),
) -> Response:
    await villa_number_service.update_villa_number(repo, villa_repo, villa_no, body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{villa_no}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Partially update a villa number",
)
async def patch_villa_number(
    villa_no: int,
    operations: list[PatchOperation],
    repo: VillaNumberRepository = Depends(get_villa_number_repository),
    villa_repo: VillaRepository = Depends(get_villa_repository),
) -> Response:
    await villa_number_service.patch_villa_number(repo, villa_repo, villa_no, operations)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{villa_no}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a villa number",
)
async def delete_villa_number(
    villa_no: int,
    repo: VillaNumberRepository = Depends(get_villa_number_repository),
) -> Response:
    if villa_no <= 0:
        return _bad_number()
    await villa_number_service.delete_villa_number(repo, villa_no)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
