"""Blueprint store contract used by the merge engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from cv_blueprint.profile.models import Blueprint, Change, ProfileData


@dataclass
class StoredBlueprint:
    blueprint: Blueprint
    version: int
    created: bool = False


@dataclass
class UpdateResult:
    success: bool
    blueprint: Optional[Blueprint] = None


@dataclass
class ChangeRecord:
    """A persisted Change tagged with the blueprint version that produced it."""

    subject_id: str
    version: int
    change: Change
    source_id: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "version": self.version,
            "source_id": self.source_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            **self.change.to_dict(),
        }


class BlueprintStore(ABC):
    """Persistence boundary for blueprints and their change log.

    get_or_create_blueprint must be atomic, and update_blueprint must be a
    compare-and-swap on version that reports a mismatch via success=False.
    """

    @abstractmethod
    def get_or_create_blueprint(self, subject_id: str) -> StoredBlueprint:
        ...

    @abstractmethod
    def update_blueprint(
        self,
        subject_id: str,
        version: int,
        profile_data: ProfileData,
        confidence_score: float,
        data_completeness: float,
        extractions_delta: int = 1,
    ) -> UpdateResult:
        ...

    @abstractmethod
    def append_changes(
        self, subject_id: str, version: int, changes: list[Change], source_id: str = ""
    ) -> None:
        ...

    @abstractmethod
    def get_blueprint(self, subject_id: str) -> Optional[Blueprint]:
        ...

    @abstractmethod
    def list_changes(self, subject_id: str) -> list[ChangeRecord]:
        ...
