"""Merge engine: fold one extraction into a subject's blueprint under optimistic concurrency.

Every attempt reads the current blueprint, merges against a private copy of
its profile, and writes the whole profile back conditioned on the version it
read. A stale write is retried from the read, never forced.
"""

import logging
from typing import Callable, Optional, Union

from cv_blueprint.config import MergeSettings
from cv_blueprint.merging.confidence import score_profile
from cv_blueprint.merging.mergers import (
    merge_contact,
    merge_education,
    merge_experience,
    merge_personal,
    merge_skills,
    remove_source,
)
from cv_blueprint.profile.models import Change, Extraction, MergeResult, MergeSummary, ProfileData
from cv_blueprint.storage.base import BlueprintStore

logger = logging.getLogger("cv_blueprint.merging.engine")


class ExtractionValidationError(ValueError):
    """Raised for input that must be rejected before touching the store."""


class MergeConflictError(RuntimeError):
    """Raised when every attempt lost the version race; the caller may retry later."""

    def __init__(self, subject_id: str, attempts: int):
        super().__init__(
            f"Blueprint for {subject_id} kept changing; gave up after {attempts} attempts"
        )
        self.subject_id = subject_id
        self.attempts = attempts


def merge_profile(
    profile: ProfileData,
    extraction: Extraction,
    source_id: str,
    settings: Optional[MergeSettings] = None,
) -> tuple[ProfileData, list[Change], MergeSummary]:
    """Run every field merger; the summary's confidence is left for the caller to fill."""
    settings = settings or MergeSettings()
    changes: list[Change] = []
    summary = MergeSummary()

    personal, personal_changes = merge_personal(profile.personal, extraction.name, extraction.summary)
    contact, contact_changes = merge_contact(profile.contact, extraction.contact_info)
    skills, skill_changes, summary.new_skills = merge_skills(
        profile.skills, extraction.skills, source_id, settings
    )
    experience, experience_changes, summary.new_experience, experience_updates = merge_experience(
        profile.experience, extraction.experience, source_id, settings
    )
    education, education_changes, summary.new_education, education_updates = merge_education(
        profile.education, extraction.education, source_id, settings
    )

    changes.extend(personal_changes)
    changes.extend(contact_changes)
    changes.extend(skill_changes)
    changes.extend(experience_changes)
    changes.extend(education_changes)

    summary.updated_fields = (
        len(personal_changes) + len(contact_changes) + experience_updates + education_updates
    )

    merged = ProfileData(
        personal=personal,
        contact=contact,
        experience=experience,
        education=education,
        skills=skills,
    )
    return merged, changes, summary


def merge_into_blueprint(
    store: BlueprintStore,
    subject_id: str,
    extraction: Union[Extraction, dict],
    source_id: Optional[str] = None,
    settings: Optional[MergeSettings] = None,
) -> MergeResult:
    """Merge an extraction into the subject's blueprint and persist it.

    Raises ExtractionValidationError for a missing subject or an empty
    extraction, and MergeConflictError once every attempt has lost to a
    concurrent writer. Store errors propagate unchanged.
    """
    settings = settings or MergeSettings()
    if isinstance(extraction, dict):
        extraction = Extraction.from_dict(extraction)
    _validate_subject(subject_id)
    if extraction is None or extraction.is_empty():
        raise ExtractionValidationError("Extraction contains no profile information")
    if source_id is not None and not isinstance(source_id, str):
        raise ExtractionValidationError("source_id must be a string")

    source_id = source_id or extraction.content_hash

    def attempt() -> Optional[MergeResult]:
        stored = store.get_or_create_blueprint(subject_id)
        profile, changes, summary = merge_profile(
            stored.blueprint.profile_data, extraction, source_id, settings
        )
        confidence, completeness = score_profile(profile)
        summary.confidence = confidence

        outcome = store.update_blueprint(subject_id, stored.version, profile, confidence, completeness)
        if not outcome.success:
            return None

        store.append_changes(subject_id, outcome.blueprint.version, changes, source_id)
        logger.info(
            "Merged %s into %s v%d: %d new skills, %d new roles, %d new education, %d updated fields",
            source_id[:12], subject_id, outcome.blueprint.version,
            summary.new_skills, summary.new_experience, summary.new_education, summary.updated_fields,
        )
        return MergeResult(outcome.blueprint, changes, summary)

    return _run_with_version_retry(attempt, subject_id, settings.max_attempts)


def remove_source_from_blueprint(
    store: BlueprintStore,
    subject_id: str,
    source_id: str,
    settings: Optional[MergeSettings] = None,
) -> MergeResult:
    """Withdraw one extraction's support from the subject's blueprint.

    A subject without a blueprint, or a source that supports nothing, leaves
    the store untouched.
    """
    settings = settings or MergeSettings()
    _validate_subject(subject_id)
    if not isinstance(source_id, str) or not source_id.strip():
        raise ExtractionValidationError("source_id is required")

    def attempt() -> Optional[MergeResult]:
        blueprint = store.get_blueprint(subject_id)
        if blueprint is None:
            return MergeResult(blueprint=None)

        profile, changes, found = remove_source(blueprint.profile_data, source_id)
        if not found:
            return MergeResult(blueprint, [], MergeSummary(confidence=blueprint.confidence_score))

        confidence, completeness = score_profile(profile)
        outcome = store.update_blueprint(
            subject_id, blueprint.version, profile, confidence, completeness, extractions_delta=-1
        )
        if not outcome.success:
            return None

        store.append_changes(subject_id, outcome.blueprint.version, changes, source_id)
        logger.info(
            "Removed %s from %s v%d: %d facts dropped",
            source_id[:12], subject_id, outcome.blueprint.version, len(changes),
        )
        summary = MergeSummary(updated_fields=len(changes), confidence=confidence)
        return MergeResult(outcome.blueprint, changes, summary)

    return _run_with_version_retry(attempt, subject_id, settings.max_attempts)


def _run_with_version_retry(
    attempt: Callable[[], Optional[MergeResult]], subject_id: str, max_attempts: int
) -> MergeResult:
    """Call attempt until it commits; None signals a lost version race."""
    for number in range(1, max_attempts + 1):
        result = attempt()
        if result is not None:
            return result
        logger.warning(
            "Version conflict on blueprint %s (attempt %d/%d), re-reading",
            subject_id, number, max_attempts,
        )

    logger.error("Giving up on blueprint %s after %d conflicting attempts", subject_id, max_attempts)
    raise MergeConflictError(subject_id, max_attempts)


def _validate_subject(subject_id: str) -> None:
    if not isinstance(subject_id, str) or not subject_id.strip():
        raise ExtractionValidationError("subject_id is required")
