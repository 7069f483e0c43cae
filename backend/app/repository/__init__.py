"""Generic persistence-access layer.

Concrete repositories bind an entity class to the shared :class:`Repository`
contract; predicates and include paths are handled by ``app.repository.query``.
"""

from app.repository.base import Repository
from app.repository.villa import VillaRepository
from app.repository.villa_number import VillaNumberRepository

__all__ = [
    "Repository",
    "VillaRepository",
    "VillaNumberRepository",
]
