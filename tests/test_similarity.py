"""Tests for fact similarity matching."""

from cv_blueprint.merging.similarity import (
    education_matches,
    experience_matches,
    find_first_match,
    skill_key,
)
from cv_blueprint.profile.models import EducationFact, ExperienceFact, RawEducation, RawExperience


class TestSkillKey:
    def test_case_and_whitespace_insensitive(self):
        assert skill_key(" Type  Script ") == skill_key("type script")


class TestExperienceMatches:
    def test_reworded_title_same_company(self):
        stored = ExperienceFact(role="Developer", company="Tech Corp", duration="2020-2022")
        incoming = RawExperience(role="Senior Developer", company=" tech corp", duration="2020-2023")
        assert experience_matches(stored, incoming)

    def test_different_company(self):
        stored = ExperienceFact(role="Developer", company="Tech Corp")
        incoming = RawExperience(role="Developer", company="New Corp")
        assert not experience_matches(stored, incoming)

    def test_different_role_same_company(self):
        stored = ExperienceFact(role="Software Engineer", company="Tech Corp")
        incoming = RawExperience(role="Sales Manager", company="Tech Corp")
        assert not experience_matches(stored, incoming)

    def test_threshold_is_configurable(self):
        stored = ExperienceFact(role="Senior Backend Engineer", company="Acme")
        incoming = RawExperience(role="Backend Developer", company="Acme")
        assert experience_matches(stored, incoming, threshold=0.5)
        assert not experience_matches(stored, incoming, threshold=0.75)


class TestEducationMatches:
    def test_degree_spelled_differently(self):
        stored = EducationFact(degree="BSc Computer Science", institution="MIT")
        incoming = RawEducation(degree="Bachelor of Science in Computer Science", institution="mit")
        assert education_matches(stored, incoming)

    def test_different_institution(self):
        stored = EducationFact(degree="MSc Physics", institution="ETH Zurich")
        incoming = RawEducation(degree="MSc Physics", institution="EPFL")
        assert not education_matches(stored, incoming)


class TestFindFirstMatch:
    def test_ambiguous_match_picks_first(self):
        candidates = [
            ExperienceFact(role="Backend Developer", company="Tech Corp"),
            ExperienceFact(role="Frontend Developer", company="Tech Corp"),
        ]
        incoming = RawExperience(role="Developer", company="Tech Corp")
        assert find_first_match(candidates, incoming, experience_matches, 0.5) == 0

    def test_no_match(self):
        candidates = [ExperienceFact(role="Developer", company="Tech Corp")]
        incoming = RawExperience(role="Developer", company="Other Inc")
        assert find_first_match(candidates, incoming, experience_matches, 0.5) is None
