"""VillaNumber model — a numbered unit belonging to a villa."""

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, TimestampMixin


class VillaNumber(TimestampMixin, Base):
    """A caller-numbered unit. The number is the primary key and never generated."""

    __tablename__ = "villa_numbers"

    villa_no: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    villa_id: Mapped[int] = mapped_column(
        ForeignKey("villas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    special_details: Mapped[str | None] = mapped_column(Text, default=None)

    # Relationships
    villa: Mapped["Villa"] = relationship(back_populates="villa_numbers", lazy="raise")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<VillaNumber(villa_no={self.villa_no}, villa_id={self.villa_id})>"
