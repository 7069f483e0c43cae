"""JSON-Patch style operations accepted by the partial-update endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class PatchOperation(BaseModel):
    """A single field-level mutation, e.g. ``{"op": "replace", "path": "/name", "value": "x"}``.

    ``add`` and ``replace`` set the field; ``remove`` clears it to ``null``.
    Only top-level scalar fields are addressable.
    """

    op: Literal["add", "replace", "remove"]
    path: str = Field(..., pattern=r"^/")
    value: Any = None

    @property
    def field(self) -> str:
        return self.path.lstrip("/")
