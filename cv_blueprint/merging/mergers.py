"""Field mergers: fold one extraction's facts into the stored profile.

Each merger is pure. It copies what it changes, returns the merged value
plus the Changes it produced, and never mutates its arguments.
"""

import copy
import logging
from dataclasses import replace
from typing import Optional

from cv_blueprint.config import MergeSettings
from cv_blueprint.merging.confidence import reinforce
from cv_blueprint.merging.similarity import (
    education_matches,
    experience_matches,
    find_first_match,
    skill_key,
)
from cv_blueprint.profile.models import (
    CONTACT_FIELDS,
    Change,
    ContactFact,
    EducationFact,
    ExperienceFact,
    PersonalInfo,
    ProfileData,
    RawEducation,
    RawExperience,
    SkillFact,
)
from cv_blueprint.utils.text_processing import is_more_specific_duration, normalize_key, tokenize

logger = logging.getLogger("cv_blueprint.merging")

# Change impacts
SKILL_IMPACT = 0.1
EXPERIENCE_IMPACT = 0.15
EDUCATION_IMPACT = 0.15
CONTACT_IMPACT = 0.05
PERSONAL_IMPACT = 0.05
REFINEMENT_IMPACT = 0.05


def merge_personal(
    existing: PersonalInfo, name: str = "", summary: str = ""
) -> tuple[PersonalInfo, list[Change]]:
    """Fill name and summary only where the blueprint has none yet."""
    merged = replace(existing)
    changes: list[Change] = []

    if not merged.name and name:
        merged.name = name
        changes.append(Change("personal", f"Added name: {name}", PERSONAL_IMPACT))
    if not merged.summary and summary:
        merged.summary = summary
        changes.append(Change("personal", "Added summary", PERSONAL_IMPACT))

    return merged, changes


def merge_contact(
    existing: ContactFact, incoming: Optional[ContactFact]
) -> tuple[ContactFact, list[Change]]:
    """Fill missing contact fields; a present value is never overwritten."""
    merged = replace(existing)
    changes: list[Change] = []
    if incoming is None:
        return merged, changes

    for name in CONTACT_FIELDS:
        value = getattr(incoming, name)
        if value and not getattr(merged, name):
            setattr(merged, name, value)
            changes.append(Change("contact", f"Added contact {name}: {value}", CONTACT_IMPACT))

    return merged, changes


def merge_skills(
    existing: list[SkillFact],
    incoming_names: list[str],
    source_id: str,
    settings: Optional[MergeSettings] = None,
) -> tuple[list[SkillFact], list[Change], int]:
    """Merge skill names by normalized key.

    A repeat confirmation from a new source appends the source and reinforces
    confidence; the same source twice is a no-op.
    """
    settings = settings or MergeSettings()
    merged = copy.deepcopy(existing)
    by_key = {skill_key(s.name): s for s in merged}
    changes: list[Change] = []
    new_count = 0

    for raw_name in incoming_names:
        name = " ".join((raw_name or "").split())
        if not name:
            continue

        key = skill_key(name)
        fact = by_key.get(key)
        if fact is not None:
            if source_id not in fact.sources:
                fact.sources.append(source_id)
                fact.confidence = reinforce(
                    fact.confidence, settings.confidence_increment, settings.max_confidence
                )
            continue

        fact = SkillFact(name=name, confidence=settings.baseline_confidence, sources=[source_id])
        merged.append(fact)
        by_key[key] = fact
        changes.append(Change("skill", f"Added new skill: {name}", SKILL_IMPACT))
        new_count += 1

    return merged, changes, new_count


def merge_experience(
    existing: list[ExperienceFact],
    incoming: list[RawExperience],
    source_id: str,
    settings: Optional[MergeSettings] = None,
) -> tuple[list[ExperienceFact], list[Change], int, int]:
    """Merge experience entries with fuzzy identity (company + role overlap).

    Returns (merged, changes, new_count, updated_fields).
    """
    settings = settings or MergeSettings()
    merged = copy.deepcopy(existing)
    changes: list[Change] = []
    new_count = 0
    updated_fields = 0

    for entry in incoming:
        if not entry.role and not entry.company:
            continue

        index = find_first_match(merged, entry, experience_matches, settings.similarity_threshold)
        if index is None:
            merged.append(ExperienceFact(
                role=entry.role,
                company=entry.company,
                duration=entry.duration,
                confidence=settings.baseline_confidence,
                description=entry.description,
                highlights=list(entry.highlights),
                sources=[source_id],
            ))
            changes.append(Change(
                "experience", f"Added new role: {entry.role} at {entry.company}", EXPERIENCE_IMPACT
            ))
            new_count += 1
            continue

        fact = merged[index]
        if source_id in fact.sources:
            continue

        previous_role = fact.role
        changed = _refine_experience(fact, entry, source_id, settings)
        if changed:
            updated_fields += len(changed)
            if "role" in changed:
                label = f"{previous_role} -> {fact.role} at {fact.company}"
            else:
                label = f"{fact.role} at {fact.company}"
            changes.append(Change(
                "experience", f"Updated {label}: {', '.join(changed)}", REFINEMENT_IMPACT
            ))

        if "role" in changed:
            # A promoted title can now resemble another stored role
            for other in _fold_duplicates(
                merged, fact, experience_matches, _absorb_experience, settings.similarity_threshold
            ):
                updated_fields += 1
                changes.append(Change(
                    "experience",
                    f"Merged duplicate role: {other.role} at {other.company}",
                    REFINEMENT_IMPACT,
                ))

    return merged, changes, new_count, updated_fields


def merge_education(
    existing: list[EducationFact],
    incoming: list[RawEducation],
    source_id: str,
    settings: Optional[MergeSettings] = None,
) -> tuple[list[EducationFact], list[Change], int, int]:
    """Merge education entries with fuzzy identity (institution + degree overlap)."""
    settings = settings or MergeSettings()
    merged = copy.deepcopy(existing)
    changes: list[Change] = []
    new_count = 0
    updated_fields = 0

    for entry in incoming:
        if not entry.degree and not entry.institution:
            continue

        index = find_first_match(merged, entry, education_matches, settings.similarity_threshold)
        if index is None:
            merged.append(EducationFact(
                degree=entry.degree,
                institution=entry.institution,
                year=entry.year,
                confidence=settings.baseline_confidence,
                sources=[source_id],
            ))
            changes.append(Change(
                "education",
                f"Added new education: {entry.degree} at {entry.institution}",
                EDUCATION_IMPACT,
            ))
            new_count += 1
            continue

        fact = merged[index]
        if source_id in fact.sources:
            continue

        changed = []
        if _more_detailed_title(entry.degree, fact.degree):
            fact.degree = entry.degree
            changed.append("degree")
        if is_more_specific_duration(entry.year, fact.year):
            fact.year = entry.year
            changed.append("year")
        fact.confidence = reinforce(
            fact.confidence, settings.confidence_increment, settings.max_confidence
        )
        fact.sources.append(source_id)

        if changed:
            updated_fields += len(changed)
            changes.append(Change(
                "education",
                f"Updated {fact.degree} at {fact.institution}: {', '.join(changed)}",
                REFINEMENT_IMPACT,
            ))

        if "degree" in changed:
            for other in _fold_duplicates(
                merged, fact, education_matches, _absorb_education, settings.similarity_threshold
            ):
                updated_fields += 1
                changes.append(Change(
                    "education",
                    f"Merged duplicate education: {other.degree} at {other.institution}",
                    REFINEMENT_IMPACT,
                ))

    return merged, changes, new_count, updated_fields


def remove_source(profile: ProfileData, source_id: str) -> tuple[ProfileData, list[Change], bool]:
    """Withdraw one extraction's support from every fact.

    Facts left without any supporting source are dropped. Personal and contact
    details are kept because they are not tracked per source. Returns
    (profile, changes, source_was_present).
    """
    result = copy.deepcopy(profile)
    changes: list[Change] = []
    found = False

    kept_skills = []
    for skill in result.skills:
        if source_id in skill.sources:
            found = True
            skill.sources = [s for s in skill.sources if s != source_id]
        if skill.sources:
            kept_skills.append(skill)
        else:
            changes.append(Change("skill", f"Removed skill: {skill.name}", -SKILL_IMPACT))
    result.skills = kept_skills

    kept_experience = []
    for fact in result.experience:
        if source_id in fact.sources:
            found = True
            fact.sources = [s for s in fact.sources if s != source_id]
        if fact.sources:
            kept_experience.append(fact)
        else:
            changes.append(Change(
                "experience", f"Removed role: {fact.role} at {fact.company}", -EXPERIENCE_IMPACT
            ))
    result.experience = kept_experience

    kept_education = []
    for fact in result.education:
        if source_id in fact.sources:
            found = True
            fact.sources = [s for s in fact.sources if s != source_id]
        if fact.sources:
            kept_education.append(fact)
        else:
            changes.append(Change(
                "education",
                f"Removed education: {fact.degree} at {fact.institution}",
                -EDUCATION_IMPACT,
            ))
    result.education = kept_education

    logger.debug("Source %s removed: %d facts dropped", source_id, len(changes))
    return result, changes, found


def _more_detailed_title(candidate: str, current: str) -> bool:
    """A title with more words wins (e.g. a promotion); ties keep the current one."""
    if not candidate or normalize_key(candidate) == normalize_key(current):
        return False
    return len(tokenize(candidate)) > len(tokenize(current))


def _refine_experience(
    fact: ExperienceFact, entry: RawExperience, source_id: str, settings: MergeSettings
) -> list[str]:
    """Apply a matching entry to a stored fact in place; return changed field names."""
    changed = []

    if _more_detailed_title(entry.role, fact.role):
        fact.role = entry.role
        changed.append("role")
    if is_more_specific_duration(entry.duration, fact.duration):
        fact.duration = entry.duration
        changed.append("duration")
    if len(entry.description) > len(fact.description):
        fact.description = entry.description
        changed.append("description")
    if len(entry.highlights) > len(fact.highlights):
        fact.highlights = list(entry.highlights)
        changed.append("highlights")

    fact.confidence = reinforce(
        fact.confidence, settings.confidence_increment, settings.max_confidence
    )
    fact.sources.append(source_id)
    return changed


def _fold_duplicates(facts: list, fact, matcher, absorb, threshold: float) -> list:
    """Fold every other stored fact that now matches ``fact`` into it, in place.

    Repeats until no other fact matches, since absorbing one can change the
    title again. Returns the folded facts in the order they were removed.
    """
    folded = []
    while True:
        index = next(
            (i for i, other in enumerate(facts) if other is not fact and matcher(other, fact, threshold)),
            None,
        )
        if index is None:
            return folded
        other = facts.pop(index)
        absorb(fact, other)
        folded.append(other)


def _absorb_sources(fact, other) -> None:
    for source in other.sources:
        if source not in fact.sources:
            fact.sources.append(source)
    fact.confidence = max(fact.confidence, other.confidence)


def _absorb_experience(fact: ExperienceFact, other: ExperienceFact) -> None:
    _absorb_sources(fact, other)
    if _more_detailed_title(other.role, fact.role):
        fact.role = other.role
    if is_more_specific_duration(other.duration, fact.duration):
        fact.duration = other.duration
    if len(other.description) > len(fact.description):
        fact.description = other.description
    if len(other.highlights) > len(fact.highlights):
        fact.highlights = list(other.highlights)


def _absorb_education(fact: EducationFact, other: EducationFact) -> None:
    _absorb_sources(fact, other)
    if _more_detailed_title(other.degree, fact.degree):
        fact.degree = other.degree
    if is_more_specific_duration(other.year, fact.year):
        fact.year = other.year
