"""SQLAlchemy models for MagicVilla API.

All models are imported here so that metadata-driven tooling (create_all,
migrations) can discover them via Base.metadata. If you add a new model,
import it in this file.
"""

from app.models.villa import Villa
from app.models.villa_number import VillaNumber

__all__ = [
    "Villa",
    "VillaNumber",
]
