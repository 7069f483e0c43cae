"""Villa model — the parent resource."""

from sqlalchemy import Float, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, TimestampMixin


class Villa(TimestampMixin, Base):
    """A rentable villa. Owns zero or more villa numbers."""

    __tablename__ = "villas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, default=None)
    rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    sqft: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_url: Mapped[str | None] = mapped_column(String(512), default=None)
    amenity: Mapped[str | None] = mapped_column(String(255), default=None)

    # Relationships — loaded only on request (include paths), children are
    # removed by the store's ON DELETE CASCADE.
    villa_numbers: Mapped[list["VillaNumber"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="villa", lazy="raise", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Villa(id={self.id}, name={self.name!r})>"


# Case-insensitive uniqueness backstop for the application-level name check.
Index("ix_villas_name_lower", func.lower(Villa.name), unique=True)
