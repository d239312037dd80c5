"""Per-fact confidence arithmetic and profile-level scores."""

from cv_blueprint.profile.models import ProfileData

# Relative trust each fact category contributes to the profile score
CATEGORY_WEIGHTS = {
    "skills": 0.2,
    "experience": 0.3,
    "education": 0.1,
}


def reinforce(confidence: float, increment: float = 0.15, ceiling: float = 0.99) -> float:
    """Move confidence a fixed share of the way toward 1.0.

    Never decreases and never passes the ceiling.
    """
    bumped = confidence + (1.0 - confidence) * increment
    return max(confidence, min(bumped, ceiling))


def confidence_score(profile: ProfileData) -> float:
    """Weighted mean of per-category average confidence.

    Categories without facts carry no weight, so a profile with no education
    is not punished for it.
    """
    weighted_total = 0.0
    weight_sum = 0.0

    for category, weight in CATEGORY_WEIGHTS.items():
        facts = getattr(profile, category)
        if not facts:
            continue
        average = sum(f.confidence for f in facts) / len(facts)
        weighted_total += weight * average
        weight_sum += weight

    if weight_sum == 0:
        return 0.0
    return _clamp(weighted_total / weight_sum)


def data_completeness(profile: ProfileData) -> float:
    """Fraction of the expected top-level fields that are populated."""
    checklist = [
        bool(profile.personal.name),
        bool(profile.contact.present_fields()),
        bool(profile.personal.summary),
        bool(profile.skills),
        bool(profile.experience or profile.education),
    ]
    return _clamp(sum(checklist) / len(checklist))


def score_profile(profile: ProfileData) -> tuple[float, float]:
    """Return (confidence_score, data_completeness), both in [0, 1]."""
    return round(confidence_score(profile), 4), round(data_completeness(profile), 4)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))
