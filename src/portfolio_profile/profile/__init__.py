"""Portfolio profile domain.

This package provides:
- Frozen value objects for the entries of a profile (experiences, projects, ...)
- ProfileAggregate, the immutable profile with derived queries
- Skill experience calculation over merged employment periods
- The fallback profile served when the backend is unavailable
"""

from portfolio_profile.profile.aggregate import (
    DEFAULT_FEATURED_COUNT,
    ProfileAggregate,
    refresh_skill_experience,
)
from portfolio_profile.profile.experience import (
    SUGGESTION_THRESHOLD_YEARS,
    DateRange,
    calculate_skill_experience,
    experiences_using,
    merge_ranges,
    parse_date,
    recalculate_skills,
    skills_used_in,
    suggested_update,
    uses_skill,
)
from portfolio_profile.profile.fallback import FALLBACK_PROFILE_ID, fallback_payload
from portfolio_profile.profile.models import (
    Academic,
    Certification,
    Contact,
    Experience,
    Honor,
    Language,
    LearningItem,
    LearningSection,
    Project,
    SoftSkill,
    Stat,
    TechnicalSkill,
    Testimonial,
)

__all__ = [
    # Models
    "Academic",
    "Certification",
    "Contact",
    "Experience",
    "Honor",
    "Language",
    "LearningItem",
    "LearningSection",
    "Project",
    "SoftSkill",
    "Stat",
    "TechnicalSkill",
    "Testimonial",
    # Aggregate
    "DEFAULT_FEATURED_COUNT",
    "ProfileAggregate",
    "refresh_skill_experience",
    # Experience
    "SUGGESTION_THRESHOLD_YEARS",
    "DateRange",
    "calculate_skill_experience",
    "experiences_using",
    "merge_ranges",
    "parse_date",
    "recalculate_skills",
    "skills_used_in",
    "suggested_update",
    "uses_skill",
    # Fallback
    "FALLBACK_PROFILE_ID",
    "fallback_payload",
]
