"""Decide whether two facts describe the same real-world thing."""

from typing import Optional, Sequence, TypeVar

from cv_blueprint.profile.models import EducationFact, ExperienceFact, RawEducation, RawExperience
from cv_blueprint.utils.text_processing import normalize_key, token_overlap

DEFAULT_THRESHOLD = 0.5

T = TypeVar("T")


def skill_key(name: str) -> str:
    return normalize_key(name)


def experience_matches(
    a: ExperienceFact | RawExperience,
    b: ExperienceFact | RawExperience,
    threshold: float = DEFAULT_THRESHOLD,
) -> bool:
    """Same employer and overlapping role titles; durations are ignored."""
    if normalize_key(a.company) != normalize_key(b.company):
        return False
    return token_overlap(a.role, b.role) >= threshold


def education_matches(
    a: EducationFact | RawEducation,
    b: EducationFact | RawEducation,
    threshold: float = DEFAULT_THRESHOLD,
) -> bool:
    if normalize_key(a.institution) != normalize_key(b.institution):
        return False
    return token_overlap(a.degree, b.degree) >= threshold


def find_first_match(candidates: Sequence[T], incoming, matcher, threshold: float) -> Optional[int]:
    """Index of the first candidate the matcher accepts, or None.

    An incoming fact resembling several stored facts merges into the earliest
    one only, so results stay deterministic.
    """
    for index, candidate in enumerate(candidates):
        if matcher(candidate, incoming, threshold):
            return index
    return None
