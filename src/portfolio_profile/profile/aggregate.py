"""Immutable profile aggregate with derived views.

A ``ProfileAggregate`` is built once from a raw payload (network or
fallback) and never mutated. Updating a profile means building a new
aggregate and replacing the reference that holds it.
"""

from __future__ import annotations

from datetime import date, datetime
from itertools import islice
from typing import Any

from pydantic import Field, ValidationError, field_validator

from portfolio_profile.exceptions import ProfileValidationError
from portfolio_profile.logging import get_logger
from portfolio_profile.profile.experience import recalculate_skills
from portfolio_profile.profile.models import (
    Academic,
    Certification,
    Contact,
    Experience,
    Honor,
    Language,
    LearningSection,
    ProfileModel,
    Project,
    SoftSkill,
    Stat,
    TechnicalSkill,
    Testimonial,
)

log = get_logger("portfolio_profile.profile.aggregate")

DEFAULT_FEATURED_COUNT = 3


class ProfileAggregate(ProfileModel):
    """The full portfolio profile and its derived queries."""

    id: str = Field(min_length=1)
    name: str
    title: str = ""
    location: str = ""
    bio: str = ""
    academics: tuple[Academic, ...] = ()
    certifications: tuple[Certification, ...] = ()
    contacts: tuple[Contact, ...] = ()
    experiences: tuple[Experience, ...] = ()
    honors: tuple[Honor, ...] = ()
    languages: tuple[Language, ...] = ()
    learning_sections: tuple[LearningSection, ...] = ()
    projects: tuple[Project, ...] = ()
    soft_skills: tuple[SoftSkill, ...] = ()
    stats: tuple[Stat, ...] = ()
    technical_skills: tuple[TechnicalSkill, ...] = ()
    testimonials: tuple[Testimonial, ...] = ()
    created_at: str
    updated_at: str

    @field_validator(
        "academics",
        "certifications",
        "contacts",
        "experiences",
        "honors",
        "languages",
        "learning_sections",
        "projects",
        "soft_skills",
        "stats",
        "technical_skills",
        "testimonials",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """Treat a null collection as empty."""
        return () if v is None else v

    @field_validator("learning_sections")
    @classmethod
    def sort_learning_sections(
        cls, v: tuple[LearningSection, ...]
    ) -> tuple[LearningSection, ...]:
        """Order learning sections for display."""
        return tuple(sorted(v, key=lambda section: section.order))

    @classmethod
    def create(cls, payload: dict[str, Any]) -> ProfileAggregate:
        """Build an aggregate from a raw profile payload.

        Raises:
            ProfileValidationError: If the payload does not match the profile shape.
        """
        if not isinstance(payload, dict):
            raise ProfileValidationError(
                f"Profile payload must be a JSON object, got {type(payload).__name__}"
            )
        try:
            aggregate = cls.model_validate(payload)
        except ValidationError as e:
            log.warning("profile_payload_invalid", error_count=e.error_count())
            raise ProfileValidationError(
                f"Profile payload is invalid: {e.error_count()} error(s)",
                errors=[dict(err) for err in e.errors(include_url=False)],
            ) from e

        log.debug(
            "profile_aggregate_created",
            profile_id=aggregate.id,
            experiences=len(aggregate.experiences),
            projects=len(aggregate.projects),
        )
        return aggregate

    def replace(self, **changes: Any) -> ProfileAggregate:
        """Return a new validated aggregate with the given fields replaced.

        Field names are snake_case. Identity and timestamps are carried over
        unless explicitly given.
        """
        data = self.model_dump()
        unknown = set(changes) - set(data)
        if unknown:
            raise ProfileValidationError(f"Unknown profile fields: {sorted(unknown)}")
        data.update(changes)
        try:
            return type(self).model_validate(data)
        except ValidationError as e:
            raise ProfileValidationError(
                f"Profile update is invalid: {e.error_count()} error(s)",
                errors=[dict(err) for err in e.errors(include_url=False)],
            ) from e

    def primary_contact(self) -> Contact | None:
        """Get the first contact flagged as primary."""
        return next((c for c in self.contacts if c.is_primary), None)

    def current_experience(self) -> Experience | None:
        """Get the first experience flagged as current."""
        return next((e for e in self.experiences if e.is_current), None)

    def featured_projects(self, count: int = DEFAULT_FEATURED_COUNT) -> tuple[Project, ...]:
        """Get up to ``count`` active or open-ended projects, in original order."""
        if count <= 0:
            return ()
        featured = (p for p in self.projects if p.is_active or not p.end_date)
        return tuple(islice(featured, count))

    def skills_by_category(self, category: str) -> tuple[TechnicalSkill, ...]:
        """Get technical skills in a category."""
        return tuple(s for s in self.technical_skills if s.category == category)

    def projects_by_category(self, category: str) -> tuple[Project, ...]:
        """Get projects in a category."""
        return tuple(p for p in self.projects if p.category == category)

    def published_learning_sections(self) -> tuple[LearningSection, ...]:
        """Get published learning sections in display order."""
        return tuple(s for s in self.learning_sections if s.published)


def refresh_skill_experience(
    aggregate: ProfileAggregate, now: date | datetime | None = None
) -> ProfileAggregate:
    """Return a new aggregate with skill experience recomputed from its experiences.

    Raises:
        ProfileValidationError: If an experience has an invalid date.
    """
    skills = recalculate_skills(aggregate.technical_skills, aggregate.experiences, now=now)
    if skills == aggregate.technical_skills:
        return aggregate
    log.info(
        "skill_experience_refreshed",
        profile_id=aggregate.id,
        updated=sum(1 for old, new in zip(aggregate.technical_skills, skills) if old != new),
    )
    return aggregate.replace(technical_skills=skills)
