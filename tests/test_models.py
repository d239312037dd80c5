"""Tests for data models."""

from cv_blueprint.profile.models import (
    Blueprint,
    Change,
    ContactFact,
    Extraction,
    MergeResult,
    MergeSummary,
    ProfileData,
    SkillFact,
)


class TestExtraction:
    def test_from_camel_case_dict(self):
        extraction = Extraction.from_dict({
            "name": "Jane Smith",
            "contactInfo": {"email": "jane@example.com", "github": "github.com/jane"},
            "experience": [{"role": "Developer", "company": "Tech Corp", "duration": "2020-2024"}],
            "skills": ["Python", " ", "Django"],
            "education": [{"degree": "BS", "institution": "College", "year": "2020"}],
        })
        assert extraction.contact_info.email == "jane@example.com"
        assert extraction.contact_info.github == "github.com/jane"
        assert extraction.experience[0].company == "Tech Corp"
        assert extraction.skills == ["Python", "Django"]

    def test_raw_contact_string(self):
        extraction = Extraction.from_dict({"contact_info": "jane@example.com | +1 555-123-4567"})
        assert extraction.contact_info.email == "jane@example.com"
        assert extraction.contact_info.phone == "+1 555-123-4567"

    def test_raw_entry_fills_empty_contact_fields(self):
        extraction = Extraction.from_dict({
            "contactInfo": {
                "email": "jane@work.com",
                "location": "Berlin",
                "raw": "jane@example.com +1 555 123 4567",
            },
        })
        assert extraction.contact_info.email == "jane@work.com"
        assert extraction.contact_info.phone == "+1 555 123 4567"
        assert extraction.contact_info.location == "Berlin"
        assert not extraction.is_empty()

    def test_tolerates_missing_and_null_fields(self):
        extraction = Extraction.from_dict({"name": None, "experience": None, "contactInfo": None})
        assert extraction.name == ""
        assert extraction.experience == []
        assert extraction.is_empty()

    def test_is_empty(self):
        assert Extraction().is_empty()
        assert not Extraction(name="Jane").is_empty()
        assert not Extraction(contact_info=ContactFact(phone="555-123-4567")).is_empty()

    def test_content_hash_deterministic(self):
        a = Extraction.from_dict({"name": "Jane", "skills": ["Python"]})
        b = Extraction.from_dict({"skills": ["Python"], "name": "Jane"})
        c = Extraction.from_dict({"name": "Jane", "skills": ["Go"]})
        assert a.content_hash == b.content_hash
        assert a.content_hash != c.content_hash
        assert len(a.content_hash) == 64


class TestProfileData:
    def test_dict_round_trip(self):
        data = {
            "personal": {"name": "Jane", "summary": ""},
            "contact": {"email": "jane@example.com"},
            "skills": [{"name": "Python", "confidence": 0.66, "sources": ["cv1", "cv2"]}],
            "experience": [{"role": "Developer", "company": "Tech Corp", "sources": ["cv1"]}],
            "education": [],
        }
        profile = ProfileData.from_dict(data)
        assert ProfileData.from_dict(profile.to_dict()) == profile
        assert profile.skills[0] == SkillFact("Python", 0.66, ["cv1", "cv2"])
        assert profile.experience[0].confidence == 0.6

    def test_empty(self):
        profile = ProfileData.from_dict(None)
        assert profile.fact_count() == 0


class TestMergeResult:
    def test_to_dict(self):
        result = MergeResult(
            blueprint=Blueprint(id=1, subject_id="user-1"),
            changes=[Change("skill", "Added new skill: Go", 0.1)],
            merge_summary=MergeSummary(new_skills=1, confidence=0.6),
        )
        data = result.to_dict()
        assert data["blueprint"]["subject_id"] == "user-1"
        assert data["blueprint"]["created_at"] is None
        assert data["changes"] == [{"type": "skill", "description": "Added new skill: Go", "impact": 0.1}]
        assert data["merge_summary"]["new_skills"] == 1
