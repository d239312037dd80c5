"""SQLAlchemy-backed blueprint store with compare-and-swap versioning."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from cv_blueprint.models import BlueprintChange, CvBlueprint, SessionLocal
from cv_blueprint.profile.models import Blueprint, Change, ProfileData
from cv_blueprint.storage.base import BlueprintStore, ChangeRecord, StoredBlueprint, UpdateResult

logger = logging.getLogger("cv_blueprint.storage")


class SqlBlueprintStore(BlueprintStore):
    """Blueprint store over the cv_blueprints / blueprint_changes tables.

    Each call runs in its own short session and commits before returning, so
    a failed call leaves no partial rows behind.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or SessionLocal

    def _find(self, session: Session, subject_id: str) -> Optional[CvBlueprint]:
        return session.scalars(
            select(CvBlueprint).where(CvBlueprint.subject_id == subject_id)
        ).first()

    def get_or_create_blueprint(self, subject_id: str) -> StoredBlueprint:
        with self.session_factory() as session:
            row = self._find(session, subject_id)
            if row is not None:
                return StoredBlueprint(row.to_blueprint(), row.version)

            now = datetime.now(timezone.utc)
            row = CvBlueprint(
                subject_id=subject_id,
                profile_data=ProfileData().to_dict(),
                total_extractions_processed=0,
                confidence_score=0.0,
                data_completeness=0.0,
                version=1,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                # A concurrent first call won the insert; the unique subject_id kept it single
                session.rollback()
                row = self._find(session, subject_id)
                if row is None:
                    raise
                return StoredBlueprint(row.to_blueprint(), row.version)

            logger.info("Created blueprint %d for subject %s", row.id, subject_id)
            return StoredBlueprint(row.to_blueprint(), row.version, created=True)

    def update_blueprint(
        self,
        subject_id: str,
        version: int,
        profile_data: ProfileData,
        confidence_score: float,
        data_completeness: float,
        extractions_delta: int = 1,
    ) -> UpdateResult:
        now = datetime.now(timezone.utc)
        total = CvBlueprint.total_extractions_processed + extractions_delta
        values = {
            "profile_data": profile_data.to_dict(),
            "confidence_score": confidence_score,
            "data_completeness": data_completeness,
            "total_extractions_processed": case((total < 0, 0), else_=total),
            "version": CvBlueprint.version + 1,
            "updated_at": now,
        }
        if extractions_delta > 0:
            values["last_extraction_at"] = now

        stmt = (
            update(CvBlueprint)
            .where(CvBlueprint.subject_id == subject_id, CvBlueprint.version == version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        with self.session_factory() as session:
            result = session.execute(stmt)
            if result.rowcount != 1:
                session.rollback()
                logger.debug("Version %d of %s is stale; update skipped", version, subject_id)
                return UpdateResult(success=False)

            # Read our own write before committing; the row stays locked until then
            row = session.scalars(
                select(CvBlueprint).where(
                    CvBlueprint.subject_id == subject_id, CvBlueprint.version == version + 1
                )
            ).one()
            written = row.to_blueprint()
            session.commit()
            return UpdateResult(success=True, blueprint=written)

    def append_changes(
        self, subject_id: str, version: int, changes: list[Change], source_id: str = ""
    ) -> None:
        if not changes:
            return

        with self.session_factory() as session:
            row = self._find(session, subject_id)
            if row is None:
                raise LookupError(f"No blueprint for subject {subject_id}")

            for change in changes:
                session.add(BlueprintChange(
                    blueprint_id=row.id,
                    subject_id=subject_id,
                    version=version,
                    source_id=source_id,
                    change_type=change.type,
                    description=change.description,
                    impact=change.impact,
                ))
            session.commit()

    def get_blueprint(self, subject_id: str) -> Optional[Blueprint]:
        with self.session_factory() as session:
            row = self._find(session, subject_id)
            return row.to_blueprint() if row else None

    def list_changes(self, subject_id: str) -> list[ChangeRecord]:
        with self.session_factory() as session:
            rows = session.scalars(
                select(BlueprintChange)
                .where(BlueprintChange.subject_id == subject_id)
                .order_by(BlueprintChange.version, BlueprintChange.id)
            ).all()
            return [
                ChangeRecord(
                    subject_id=row.subject_id,
                    version=row.version,
                    change=Change(row.change_type, row.description, row.impact),
                    source_id=row.source_id or "",
                    created_at=row.created_at,
                )
                for row in rows
            ]
