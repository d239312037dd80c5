"""Blueprint change model: append-only audit log of merge changes."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class BlueprintChange(Base):
    __tablename__ = "blueprint_changes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    blueprint_id: Mapped[int] = mapped_column(Integer, ForeignKey("cv_blueprints.id"), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)  # blueprint version that produced it
    source_id: Mapped[str] = mapped_column(String(255), default="")  # usually a SHA-256 hex digest

    change_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    impact: Mapped[float] = mapped_column(Float, default=0.0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    blueprint: Mapped["CvBlueprint"] = relationship(back_populates="changes")
