"""Tests for the villa and villa number calling-layer rules."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.exceptions import ConstraintViolation, NotFound, PatchRejected
from app.models.villa import Villa
from app.models.villa_number import VillaNumber
from app.repository.villa import VillaRepository
from app.repository.villa_number import VillaNumberRepository
from app.schemas.patch import PatchOperation
from app.schemas.villa import VillaCreate, VillaUpdate
from app.schemas.villa_number import VillaNumberCreate, VillaNumberUpdate
from app.services import villa_number_service, villa_service
from app.services.villa_number_service import PARENT_INVALID


class TestVillaService:
    async def test_create_and_get(self, villa_repo: VillaRepository) -> None:
        villa = await villa_service.create_villa(villa_repo, VillaCreate(name="Pool View", rate=120.0))
        loaded = await villa_service.get_villa(villa_repo, villa.id)
        assert loaded.name == "Pool View"
        assert loaded.rate == 120.0

    @pytest.mark.parametrize("duplicate", ["Pool View", "pool view", "POOL VIEW", "pOoL vIeW"])
    async def test_name_unique_ignoring_case(self, villa_repo: VillaRepository, duplicate: str) -> None:
        await villa_service.create_villa(villa_repo, VillaCreate(name="Pool View"))
        with pytest.raises(ConstraintViolation, match="Villa already exists"):
            await villa_service.create_villa(villa_repo, VillaCreate(name=duplicate))
        assert len(await villa_service.list_villas(villa_repo)) == 1

    async def test_list_is_ordered_by_id(self, villa_repo: VillaRepository) -> None:
        for name in ("Charlie", "Alpha", "Bravo"):
            await villa_service.create_villa(villa_repo, VillaCreate(name=name))
        villas = await villa_service.list_villas(villa_repo)
        assert [v.name for v in villas] == ["Charlie", "Alpha", "Bravo"]

    async def test_get_missing(self, villa_repo: VillaRepository) -> None:
        with pytest.raises(NotFound):
            await villa_service.get_villa(villa_repo, 404)

    async def test_update_requires_matching_id(self, villa_repo: VillaRepository, test_villa: Villa) -> None:
        body = VillaUpdate(id=test_villa.id + 1, name="Other", rate=1, sqft=1, occupancy=1)
        with pytest.raises(ConstraintViolation):
            await villa_service.update_villa(villa_repo, test_villa.id, body)

    async def test_update_rejects_name_of_another_villa(self, villa_repo: VillaRepository, test_villa: Villa) -> None:
        other = await villa_service.create_villa(villa_repo, VillaCreate(name="Second"))
        body = VillaUpdate(id=other.id, name="ROYAL VILLA", rate=1, sqft=1, occupancy=1)
        with pytest.raises(ConstraintViolation, match="Villa already exists"):
            await villa_service.update_villa(villa_repo, other.id, body)

    async def test_update_may_keep_own_name(
        self,
        villa_repo: VillaRepository,
        test_villa: Villa,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        body = VillaUpdate(id=test_villa.id, name="royal villa", rate=300, sqft=550, occupancy=6)
        await villa_service.update_villa(villa_repo, test_villa.id, body)

        async with session_factory() as other:
            reloaded = await villa_service.get_villa(VillaRepository(other), test_villa.id)
        assert reloaded.name == "royal villa"
        assert reloaded.occupancy == 6

    async def test_update_missing(self, villa_repo: VillaRepository) -> None:
        body = VillaUpdate(id=77, name="Nowhere", rate=1, sqft=1, occupancy=1)
        with pytest.raises(NotFound):
            await villa_service.update_villa(villa_repo, 77, body)

    async def test_patch(self, villa_repo: VillaRepository, test_villa: Villa) -> None:
        villa = await villa_service.patch_villa(
            villa_repo, test_villa.id, [PatchOperation(op="replace", path="/rate", value=99.5)]
        )
        assert villa.rate == 99.5

    @pytest.mark.parametrize("duplicate", ["Royal Villa", "ROYAL VILLA"])
    async def test_patch_rejects_name_of_another_villa(
        self, villa_repo: VillaRepository, test_villa: Villa, duplicate: str
    ) -> None:
        other = await villa_service.create_villa(villa_repo, VillaCreate(name="Garden Villa"))
        with pytest.raises(ConstraintViolation, match="Villa already exists"):
            await villa_service.patch_villa(
                villa_repo, other.id, [PatchOperation(op="replace", path="/name", value=duplicate)]
            )

    async def test_patch_may_change_case_of_own_name(self, villa_repo: VillaRepository, test_villa: Villa) -> None:
        villa = await villa_service.patch_villa(
            villa_repo, test_villa.id, [PatchOperation(op="replace", path="/name", value="ROYAL VILLA")]
        )
        assert villa.name == "ROYAL VILLA"

    async def test_delete_then_delete_again(self, villa_repo: VillaRepository, test_villa: Villa) -> None:
        await villa_service.delete_villa(villa_repo, test_villa.id)
        with pytest.raises(NotFound):
            await villa_service.delete_villa(villa_repo, test_villa.id)


class TestVillaNumberService:
    async def test_create_under_existing_villa(
        self,
        villa_number_repo: VillaNumberRepository,
        villa_repo: VillaRepository,
        test_villa: Villa,
    ) -> None:
        body = VillaNumberCreate(villa_no=101, villa_id=test_villa.id, special_details="Sea view")
        villa_number = await villa_number_service.create_villa_number(villa_number_repo, villa_repo, body)
        assert villa_number.villa_no == 101
        assert villa_number.villa_id == test_villa.id

    async def test_create_with_missing_parent(
        self, villa_number_repo: VillaNumberRepository, villa_repo: VillaRepository
    ) -> None:
        body = VillaNumberCreate(villa_no=101, villa_id=5, special_details="Sea view")
        with pytest.raises(ConstraintViolation) as exc_info:
            await villa_number_service.create_villa_number(villa_number_repo, villa_repo, body)
        assert exc_info.value.message == PARENT_INVALID
        assert await villa_number_repo.get_all() == []

    async def test_create_duplicate_number(
        self,
        villa_number_repo: VillaNumberRepository,
        villa_repo: VillaRepository,
        test_villa_number: VillaNumber,
    ) -> None:
        body = VillaNumberCreate(villa_no=test_villa_number.villa_no, villa_id=test_villa_number.villa_id)
        with pytest.raises(ConstraintViolation, match="Villa number already exists"):
            await villa_number_service.create_villa_number(villa_number_repo, villa_repo, body)

    async def test_get_includes_parent(
        self,
        test_villa_number: VillaNumber,
        test_villa: Villa,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        async with session_factory() as other:
            villa_number = await villa_number_service.get_villa_number(
                VillaNumberRepository(other), test_villa_number.villa_no
            )
        assert villa_number.villa.name == test_villa.name

    async def test_get_missing(self, villa_number_repo: VillaNumberRepository) -> None:
        with pytest.raises(NotFound, match="Villa number 9 not found"):
            await villa_number_service.get_villa_number(villa_number_repo, 9)

    async def test_update_checks_parent(
        self,
        villa_number_repo: VillaNumberRepository,
        villa_repo: VillaRepository,
        test_villa_number: VillaNumber,
    ) -> None:
        body = VillaNumberUpdate(villa_no=test_villa_number.villa_no, villa_id=999)
        with pytest.raises(ConstraintViolation, match=PARENT_INVALID):
            await villa_number_service.update_villa_number(
                villa_number_repo, villa_repo, test_villa_number.villa_no, body
            )

    async def test_update_cannot_change_number(
        self,
        villa_number_repo: VillaNumberRepository,
        villa_repo: VillaRepository,
        test_villa_number: VillaNumber,
    ) -> None:
        body = VillaNumberUpdate(villa_no=202, villa_id=test_villa_number.villa_id)
        with pytest.raises(ConstraintViolation):
            await villa_number_service.update_villa_number(
                villa_number_repo, villa_repo, test_villa_number.villa_no, body
            )

    async def test_update_moves_to_another_villa(
        self,
        villa_number_repo: VillaNumberRepository,
        villa_repo: VillaRepository,
        test_villa_number: VillaNumber,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        other_villa = await villa_service.create_villa(villa_repo, VillaCreate(name="Hill Villa"))
        body = VillaNumberUpdate(villa_no=test_villa_number.villa_no, villa_id=other_villa.id, special_details="Moved")
        await villa_number_service.update_villa_number(
            villa_number_repo, villa_repo, test_villa_number.villa_no, body
        )

        async with session_factory() as other:
            reloaded = await VillaNumberRepository(other).get(VillaNumber.villa_no == body.villa_no)
        assert reloaded.villa_id == other_villa.id
        assert reloaded.special_details == "Moved"

    async def test_patch_to_missing_parent_rejected(
        self,
        villa_number_repo: VillaNumberRepository,
        villa_repo: VillaRepository,
        test_villa_number: VillaNumber,
    ) -> None:
        with pytest.raises(ConstraintViolation, match=PARENT_INVALID):
            await villa_number_service.patch_villa_number(
                villa_number_repo,
                villa_repo,
                test_villa_number.villa_no,
                [PatchOperation(op="replace", path="/villa_id", value=4040)],
            )

    async def test_patch_invalid_field(
        self,
        villa_number_repo: VillaNumberRepository,
        villa_repo: VillaRepository,
        test_villa_number: VillaNumber,
    ) -> None:
        with pytest.raises(PatchRejected):
            await villa_number_service.patch_villa_number(
                villa_number_repo,
                villa_repo,
                test_villa_number.villa_no,
                [PatchOperation(op="replace", path="/villa", value={"name": "x"})],
            )

    async def test_delete(
        self, villa_number_repo: VillaNumberRepository, test_villa_number: VillaNumber
    ) -> None:
        villa_no = test_villa_number.villa_no
        await villa_number_service.delete_villa_number(villa_number_repo, villa_no)
        with pytest.raises(NotFound):
            await villa_number_service.delete_villa_number(villa_number_repo, villa_no)
