"""Blueprint profile and extraction data models."""

import hashlib
import json
import re
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, Optional

CONTACT_FIELDS = ("email", "phone", "location", "linkedin", "github", "website")

CHANGE_TYPES = ("skill", "experience", "education", "contact", "personal")

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
_PHONE_RE = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting camelCase and snake_case spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class PersonalInfo:
    name: str = ""
    summary: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PersonalInfo":
        data = data or {}
        return cls(name=_str(data.get("name")), summary=_str(data.get("summary")))


@dataclass
class ContactFact:
    """Contact details; every field is independently present or empty."""

    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ContactFact":
        """Build from a mapping; a free-text ``raw`` entry fills fields left empty."""
        data = data or {}
        contact = cls(**{name: _str(data.get(name)) for name in CONTACT_FIELDS})
        if isinstance(data.get("raw"), str):
            scanned = cls.from_raw(data["raw"])
            for name in CONTACT_FIELDS:
                if not getattr(contact, name):
                    setattr(contact, name, getattr(scanned, name))
        return contact

    @classmethod
    def from_raw(cls, raw: Any) -> "ContactFact":
        """Build from a structured mapping or a free-text contact line."""
        if isinstance(raw, dict):
            return cls.from_dict(raw)
        if not isinstance(raw, str) or not raw.strip():
            return cls()

        contact = cls()
        email_match = _EMAIL_RE.search(raw)
        if email_match:
            contact.email = email_match.group(0)
        phone_match = _PHONE_RE.search(raw)
        if phone_match:
            contact.phone = phone_match.group(0).strip()
        return contact

    def present_fields(self) -> list[str]:
        return [name for name in CONTACT_FIELDS if getattr(self, name)]


@dataclass
class SkillFact:
    name: str
    confidence: float = 0.6
    sources: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SkillFact":
        return cls(
            name=_str(data.get("name")),
            confidence=float(data.get("confidence", 0.6)),
            sources=list(data.get("sources") or []),
        )


@dataclass
class ExperienceFact:
    role: str
    company: str
    duration: str = ""
    confidence: float = 0.6
    description: str = ""
    highlights: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ExperienceFact":
        return cls(
            role=_str(data.get("role")),
            company=_str(data.get("company")),
            duration=_str(data.get("duration")),
            confidence=float(data.get("confidence", 0.6)),
            description=_str(data.get("description")),
            highlights=[_str(h) for h in data.get("highlights") or [] if _str(h)],
            sources=list(data.get("sources") or []),
        )


@dataclass
class EducationFact:
    degree: str
    institution: str
    year: str = ""
    confidence: float = 0.6
    sources: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "EducationFact":
        return cls(
            degree=_str(data.get("degree")),
            institution=_str(data.get("institution")),
            year=_str(data.get("year")),
            confidence=float(data.get("confidence", 0.6)),
            sources=list(data.get("sources") or []),
        )


@dataclass
class ProfileData:
    """The merged profile held by a blueprint."""

    personal: PersonalInfo = field(default_factory=PersonalInfo)
    contact: ContactFact = field(default_factory=ContactFact)
    experience: list[ExperienceFact] = field(default_factory=list)
    education: list[EducationFact] = field(default_factory=list)
    skills: list[SkillFact] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ProfileData":
        data = data or {}
        return cls(
            personal=PersonalInfo.from_dict(data.get("personal")),
            contact=ContactFact.from_dict(data.get("contact")),
            experience=[ExperienceFact.from_dict(e) for e in data.get("experience") or []],
            education=[EducationFact.from_dict(e) for e in data.get("education") or []],
            skills=[SkillFact.from_dict(s) for s in data.get("skills") or []],
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def fact_count(self) -> int:
        return len(self.skills) + len(self.experience) + len(self.education)


@dataclass
class RawExperience:
    """An experience entry as produced by one extraction (no confidence yet)."""

    role: str = ""
    company: str = ""
    duration: str = ""
    description: str = ""
    highlights: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RawExperience":
        return cls(
            role=_str(data.get("role")),
            company=_str(data.get("company")),
            duration=_str(data.get("duration")),
            description=_str(data.get("description")),
            highlights=[_str(h) for h in data.get("highlights") or [] if _str(h)],
        )


@dataclass
class RawEducation:
    degree: str = ""
    institution: str = ""
    year: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "RawEducation":
        return cls(
            degree=_str(data.get("degree")),
            institution=_str(data.get("institution")),
            year=_str(data.get("year")),
        )


@dataclass
class Extraction:
    """One structured, possibly partial CV parse submitted for merging."""

    name: str = ""
    contact_info: ContactFact = field(default_factory=ContactFact)
    summary: str = ""
    experience: list[RawExperience] = field(default_factory=list)
    education: list[RawEducation] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Extraction":
        data = data or {}
        return cls(
            name=_str(data.get("name")),
            contact_info=ContactFact.from_raw(_pick(data, "contact_info", "contactInfo")),
            summary=_str(data.get("summary")),
            experience=[
                RawExperience.from_dict(e) for e in data.get("experience") or [] if isinstance(e, dict)
            ],
            education=[
                RawEducation.from_dict(e) for e in data.get("education") or [] if isinstance(e, dict)
            ],
            skills=[_str(s) for s in data.get("skills") or [] if _str(s)],
        )

    def is_empty(self) -> bool:
        return not (
            self.name
            or self.summary
            or self.contact_info.present_fields()
            or self.skills
            or self.experience
            or self.education
        )

    @property
    def content_hash(self) -> str:
        """SHA-256 of the canonical JSON form; stable source id for this extraction."""
        raw = json.dumps(asdict(self), sort_keys=True, ensure_ascii=False)
        return hashlib.sha256(raw.encode()).hexdigest()


@dataclass(frozen=True)
class Change:
    """Immutable audit record of one atomic modification made during a merge."""

    type: str
    description: str
    impact: float

    def to_dict(self) -> dict:
        return {"type": self.type, "description": self.description, "impact": self.impact}


@dataclass
class Blueprint:
    """The durable, evolving merged profile for one subject."""

    id: Optional[int]
    subject_id: str
    profile_data: ProfileData = field(default_factory=ProfileData)
    total_extractions_processed: int = 0
    confidence_score: float = 0.0
    data_completeness: float = 0.0
    version: int = 1
    last_extraction_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["profile_data"] = self.profile_data.to_dict()
        for key in ("last_extraction_at", "created_at", "updated_at"):
            value = data[key]
            data[key] = value.isoformat() if value else None
        return data


@dataclass
class MergeSummary:
    new_skills: int = 0
    new_experience: int = 0
    new_education: int = 0
    updated_fields: int = 0
    confidence: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MergeResult:
    blueprint: Optional[Blueprint]
    changes: list[Change] = field(default_factory=list)
    merge_summary: MergeSummary = field(default_factory=MergeSummary)

    def to_dict(self) -> dict:
        return {
            "blueprint": self.blueprint.to_dict() if self.blueprint else None,
            "changes": [c.to_dict() for c in self.changes],
            "merge_summary": self.merge_summary.to_dict(),
        }
