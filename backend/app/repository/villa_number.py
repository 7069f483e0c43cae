"""VillaNumber repository."""

from app.models.villa_number import VillaNumber
from app.repository.base import Repository


class VillaNumberRepository(Repository[VillaNumber]):
    model = VillaNumber
