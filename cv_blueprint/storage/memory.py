"""In-process blueprint store for tests and embedding."""

import copy
import itertools
import threading
from datetime import datetime, timezone
from typing import Optional

from cv_blueprint.profile.models import Blueprint, Change, ProfileData
from cv_blueprint.storage.base import BlueprintStore, ChangeRecord, StoredBlueprint, UpdateResult


class InMemoryBlueprintStore(BlueprintStore):
    """Dictionary-backed store; every read and write is a deep copy under one lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._blueprints: dict[str, Blueprint] = {}
        self._changes: list[ChangeRecord] = []
        self._ids = itertools.count(1)

    def get_or_create_blueprint(self, subject_id: str) -> StoredBlueprint:
        with self._lock:
            created = False
            blueprint = self._blueprints.get(subject_id)
            if blueprint is None:
                now = datetime.now(timezone.utc)
                blueprint = Blueprint(
                    id=next(self._ids),
                    subject_id=subject_id,
                    created_at=now,
                    updated_at=now,
                )
                self._blueprints[subject_id] = blueprint
                created = True
            return StoredBlueprint(copy.deepcopy(blueprint), blueprint.version, created)

    def update_blueprint(
        self,
        subject_id: str,
        version: int,
        profile_data: ProfileData,
        confidence_score: float,
        data_completeness: float,
        extractions_delta: int = 1,
    ) -> UpdateResult:
        with self._lock:
            current = self._blueprints.get(subject_id)
            if current is None or current.version != version:
                return UpdateResult(success=False)

            now = datetime.now(timezone.utc)
            current.profile_data = copy.deepcopy(profile_data)
            current.confidence_score = confidence_score
            current.data_completeness = data_completeness
            current.total_extractions_processed = max(
                0, current.total_extractions_processed + extractions_delta
            )
            current.version += 1
            current.updated_at = now
            if extractions_delta > 0:
                current.last_extraction_at = now
            return UpdateResult(success=True, blueprint=copy.deepcopy(current))

    def append_changes(
        self, subject_id: str, version: int, changes: list[Change], source_id: str = ""
    ) -> None:
        now = datetime.now(timezone.utc)
        with self._lock:
            for change in changes:
                self._changes.append(ChangeRecord(subject_id, version, change, source_id, now))

    def get_blueprint(self, subject_id: str) -> Optional[Blueprint]:
        with self._lock:
            blueprint = self._blueprints.get(subject_id)
            return copy.deepcopy(blueprint) if blueprint else None

    def list_changes(self, subject_id: str) -> list[ChangeRecord]:
        with self._lock:
            records = [r for r in self._changes if r.subject_id == subject_id]
        return sorted(records, key=lambda r: r.version)
