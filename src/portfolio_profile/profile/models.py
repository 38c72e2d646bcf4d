"""Value objects for the entries of a portfolio profile.

All models are frozen pydantic models. The backend speaks camelCase JSON
(``startDate``, ``isCurrent``); fields are snake_case in Python and accept
either spelling on input. Collections are stored as tuples so that a
constructed entry cannot be mutated through any reference.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Known category values. The backend is the authority on these, so models
# accept any string and these are only used for documentation and defaults.
CONTACT_TYPES = ("email", "phone", "linkedin", "github", "website", "other")
PROJECT_CATEGORIES = ("web", "mobile", "ai", "backend", "fullstack", "other")
SKILL_CATEGORIES = ("language", "framework", "database", "tool", "cloud", "other")
PROFICIENCY_LEVELS = ("expert", "advanced", "intermediate", "beginner")
LANGUAGE_PROFICIENCIES = ("native", "fluent", "professional", "conversational", "basic")


class ProfileModel(BaseModel):
    """Base for profile value objects."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Convert to a camelCase JSON-ready dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Academic(ProfileModel):
    """An academic qualification."""

    id: str = ""
    institution: str
    degree: str = ""
    field: str = ""
    start_date: str = ""
    end_date: str | None = None
    description: str | None = None


class Certification(ProfileModel):
    """A professional certification."""

    id: str = ""
    name: str
    issuer: str = ""
    issue_date: str = ""
    expiry_date: str | None = None
    credential_id: str | None = None
    credential_url: str | None = None


class Contact(ProfileModel):
    """A way to reach the profile owner."""

    id: str = ""
    type: str = "other"
    value: str
    label: str = ""
    is_primary: bool = False


class Experience(ProfileModel):
    """A period of employment.

    ``skill_ids`` holds technical skill *names*, not surrogate ids.
    An absent ``end_date`` means the position is ongoing.
    """

    id: str = ""
    company: str
    position: str
    location: str = ""
    start_date: str
    end_date: str | None = None
    is_current: bool = False
    description: str = ""
    achievements: tuple[str, ...] = ()
    technologies: tuple[str, ...] = ()
    skill_ids: tuple[str, ...] | None = None


class Honor(ProfileModel):
    """An award or honor."""

    id: str = ""
    title: str
    issuer: str = ""
    date: str = ""
    description: str | None = None
    url: str | None = None


class Language(ProfileModel):
    """A spoken language."""

    id: str = ""
    name: str
    proficiency: str = "basic"


class Project(ProfileModel):
    """A portfolio project."""

    id: str = ""
    title: str
    description: str = ""
    long_description: str | None = None
    technologies: tuple[str, ...] = ()
    category: str = "other"
    start_date: str = ""
    end_date: str | None = None
    is_active: bool = False
    github_url: str | None = None
    live_url: str | None = None
    image_url: str | None = None
    achievements: tuple[str, ...] = ()
    architecture: str | None = None


class SoftSkill(ProfileModel):
    """A non-technical skill."""

    id: str = ""
    name: str
    category: str = "other"


class Stat(ProfileModel):
    """A headline number shown on the site."""

    id: str = ""
    label: str
    value: str | int | float
    unit: str | None = None
    description: str | None = None


class TechnicalSkill(ProfileModel):
    """A technical skill with optional stored years of experience."""

    id: str = ""
    name: str
    category: str = "other"
    proficiency: str = "intermediate"
    years_of_experience: float | None = Field(default=None, ge=0)


class Testimonial(ProfileModel):
    """A quote from a colleague or client."""

    id: str = ""
    author: str
    role: str = ""
    company: str = ""
    content: str
    date: str = ""
    avatar_url: str | None = None


class LearningItem(ProfileModel):
    """A single topic inside a learning section."""

    id: str = ""
    title: str
    description: str | None = None
    order: int = 0
    content: str | None = None
    code_example: str | None = None
    code_language: str | None = None
    image_url: str | None = None


class LearningSection(ProfileModel):
    """A published or draft group of learning topics, shown by ``order``."""

    id: str = ""
    title: str
    slug: str = ""
    description: str | None = None
    order: int = 0
    published: bool = False
    items: tuple[LearningItem, ...] = ()

    @field_validator("items")
    @classmethod
    def sort_items(cls, v: tuple[LearningItem, ...]) -> tuple[LearningItem, ...]:
        """Keep topics in display order."""
        return tuple(sorted(v, key=lambda item: item.order))
