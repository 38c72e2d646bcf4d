"""Skill experience calculation from employment history.

Years of experience for a skill are derived from the experiences that
mention it. Overlapping employment periods are merged before measuring,
so two concurrent jobs using the same skill count once.

All functions are pure: they take immutable inputs and never touch I/O.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime

from portfolio_profile.exceptions import ProfileValidationError
from portfolio_profile.logging import get_logger
from portfolio_profile.profile.models import Experience, TechnicalSkill

log = get_logger("portfolio_profile.profile.experience")

# Stored values within this many years of the computed value are left alone.
SUGGESTION_THRESHOLD_YEARS = 0.5
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class DateRange:
    """A closed calendar interval ``[start, end]``."""

    start: date
    end: date

    def overlaps(self, other: DateRange) -> bool:
        """Check whether two ranges overlap or touch."""
        return self.start <= other.end and self.end >= other.start

    def union(self, other: DateRange) -> DateRange:
        """Return the smallest range covering both."""
        return DateRange(min(self.start, other.start), max(self.end, other.end))

    @property
    def months(self) -> float:
        """Elapsed months, counting leftover days as fractions of a 30-day month."""
        years = self.end.year - self.start.year
        months = self.end.month - self.start.month
        days = self.end.day - self.start.day
        total = years * 12 + months + max(0, days) / DAYS_PER_MONTH
        return max(0.0, total)


def parse_date(value: str, field: str = "date") -> date:
    """Parse a profile date string to a calendar date.

    Accepts ``YYYY-MM-DD``, ``YYYY-MM`` and full ISO-8601 timestamps
    (including a trailing ``Z``). Timestamps with an offset are converted
    to UTC first; time of day is then discarded.

    Raises:
        ProfileValidationError: If the value cannot be parsed.
    """
    text = value.strip() if isinstance(value, str) else ""
    if len(text) == 7:
        text = f"{text}-01"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ProfileValidationError(
            f"Invalid {field}: {value!r}",
            errors=[{"loc": (field,), "msg": str(e), "input": value}],
        ) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed.date()


def uses_skill(experience: Experience, skill_name: str) -> bool:
    """Check whether an experience counts toward a skill.

    Technologies match case-insensitively; ``skill_ids`` match exactly.
    """
    if experience.skill_ids and skill_name in experience.skill_ids:
        return True
    wanted = skill_name.lower()
    return any(tech.lower() == wanted for tech in experience.technologies)


def experiences_using(
    skill_name: str, experiences: Iterable[Experience]
) -> tuple[Experience, ...]:
    """Return the experiences that use a skill, in their original order."""
    return tuple(exp for exp in experiences if uses_skill(exp, skill_name))


def skills_used_in(
    experience: Experience, all_skills: Iterable[TechnicalSkill]
) -> tuple[TechnicalSkill, ...]:
    """Return the skills from the catalogue referenced by an experience's ``skill_ids``."""
    if not experience.skill_ids:
        return ()
    return tuple(skill for skill in all_skills if skill.name in experience.skill_ids)


def experience_range(experience: Experience, today: date) -> DateRange:
    """Convert an experience to a date range. Ongoing experiences end ``today``."""
    start = parse_date(experience.start_date, "startDate")
    end = parse_date(experience.end_date, "endDate") if experience.end_date else today
    return DateRange(start, end)


def merge_ranges(ranges: Iterable[DateRange]) -> list[DateRange]:
    """Coalesce overlapping or touching ranges into disjoint ranges.

    Each incoming range absorbs every existing range it overlaps, so the
    result does not depend on input order.
    """
    merged: list[DateRange] = []
    for current in ranges:
        kept: list[DateRange] = []
        for existing in merged:
            if current.overlaps(existing):
                current = current.union(existing)
            else:
                kept.append(existing)
        kept.append(current)
        merged = kept
    return merged


def _round_years(months: float) -> float:
    # Half-up rounding to one decimal place
    return math.floor(months / 12 * 10 + 0.5) / 10


def calculate_skill_experience(
    skill_name: str,
    experiences: Sequence[Experience],
    now: date | datetime | None = None,
) -> float:
    """Calculate total years of experience with a skill.

    Args:
        skill_name: Skill to measure.
        experiences: All experiences of the profile.
        now: End date for ongoing experiences. Defaults to today.

    Returns:
        Years of experience rounded to one decimal place, 0.0 if unused.

    Raises:
        ProfileValidationError: If a matching experience has an invalid date.
    """
    related = experiences_using(skill_name, experiences)
    if not related:
        return 0.0

    today = _as_date(now)
    ranges = merge_ranges(experience_range(exp, today) for exp in related)
    total_months = sum(r.months for r in ranges)
    years = _round_years(total_months)

    log.debug(
        "skill_experience_calculated",
        skill=skill_name,
        experiences=len(related),
        ranges=len(ranges),
        years=years,
    )
    return years


def suggested_update(
    skill: TechnicalSkill,
    experiences: Sequence[Experience],
    now: date | datetime | None = None,
) -> float | None:
    """Suggest a new years-of-experience value for a skill.

    Returns the computed value if the skill has none stored, or if it differs
    from the stored value by more than ``SUGGESTION_THRESHOLD_YEARS``.
    Returns None when no update is needed.
    """
    calculated = calculate_skill_experience(skill.name, experiences, now=now)
    if skill.years_of_experience is None:
        return calculated

    difference = round(abs(calculated - skill.years_of_experience), 6)
    if difference > SUGGESTION_THRESHOLD_YEARS:
        return calculated
    return None


def recalculate_skills(
    skills: Iterable[TechnicalSkill],
    experiences: Sequence[Experience],
    now: date | datetime | None = None,
) -> tuple[TechnicalSkill, ...]:
    """Recompute stored years of experience for a skill catalogue.

    A skill is only updated when it has no stored value or the computed value
    is larger; manually entered experience from outside the listed jobs is
    never reduced.
    """
    today = _as_date(now)
    updated: list[TechnicalSkill] = []
    for skill in skills:
        calculated = calculate_skill_experience(skill.name, experiences, now=today)
        stored = skill.years_of_experience
        if stored is None or calculated > stored:
            skill = skill.model_copy(update={"years_of_experience": calculated})
        updated.append(skill)
    return tuple(updated)


def _as_date(value: date | datetime | None) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value
