"""Villa repository."""

from app.models.villa import Villa
from app.repository.base import Repository


class VillaRepository(Repository[Villa]):
    model = Villa
