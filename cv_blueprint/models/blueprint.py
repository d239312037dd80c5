"""Blueprint model: one merged profile row per subject."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cv_blueprint.profile.models import Blueprint, ProfileData

from .base import Base


class CvBlueprint(Base):
    __tablename__ = "cv_blueprints"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    profile_data: Mapped[dict] = mapped_column(JSON, default=lambda: ProfileData().to_dict())
    total_extractions_processed: Mapped[int] = mapped_column(Integer, default=0)
    confidence_score: Mapped[float] = mapped_column(Float, default=0.0)
    data_completeness: Mapped[float] = mapped_column(Float, default=0.0)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    last_extraction_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    changes: Mapped[list["BlueprintChange"]] = relationship(
        back_populates="blueprint", cascade="all, delete-orphan"
    )

    def to_blueprint(self) -> Blueprint:
        """Convert DB row to the Blueprint dataclass."""
        return Blueprint(
            id=self.id,
            subject_id=self.subject_id,
            profile_data=ProfileData.from_dict(self.profile_data),
            total_extractions_processed=self.total_extractions_processed or 0,
            confidence_score=self.confidence_score or 0.0,
            data_completeness=self.data_completeness or 0.0,
            version=self.version,
            last_extraction_at=self.last_extraction_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
