"""Static profile served when the backend is unavailable.

The payload uses the same camelCase shape as ``GET /api/profile`` so it
goes through the same validation as live data.
"""

import copy
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from portfolio_profile.exceptions import ProfileValidationError
from portfolio_profile.logging import get_logger

log = get_logger("portfolio_profile.profile.fallback")

FALLBACK_PROFILE_ID = "fallback-profile"

_FALLBACK_PROFILE: dict[str, Any] = {
    "id": FALLBACK_PROFILE_ID,
    "name": "Ricky Chen",
    "title": "Software Engineer & AI Researcher",
    "location": "Sydney, Australia",
    "bio": (
        "Experienced in backend, mobile, and frontend development, with hands-on "
        "projects at Samsung R&D and Apple Developer Academy. Strong foundation in "
        "algorithms and competitive programming."
    ),
    "academics": [],
    "certifications": [],
    "contacts": [
        {
            "id": "contact-1",
            "type": "email",
            "value": "ricky.chen@example.com",
            "label": "Email",
            "isPrimary": True,
        },
    ],
    "experiences": [],
    "honors": [],
    "languages": [],
    "projects": [
        {
            "id": "project-1",
            "title": "giftforyou.idn",
            "description": "A full-stack e-commerce platform for bouquet shopping in Indonesia.",
            "technologies": ["React", "TypeScript", "Express.js", "MongoDB", "Node.js"],
            "category": "fullstack",
            "startDate": "2025-01-01",
            "isActive": True,
            "githubUrl": "https://github.com/rickychen930/giftforyou.idn",
            "achievements": [
                "Built production-ready e-commerce platform with modern tech stack",
                "Implemented secure authentication and payment integration",
            ],
        },
        {
            "id": "project-2",
            "title": "TV Plugin - SmartThings",
            "description": (
                "A TV control plugin for the Samsung SmartThings app enabling device "
                "discovery, remote control, and status monitoring."
            ),
            "technologies": ["TypeScript", "Node.js", "Samsung SmartThings SDK", "REST APIs"],
            "category": "backend",
            "startDate": "2023-05-01",
            "endDate": "2024-05-31",
            "isActive": False,
            "achievements": [
                "Enabled device discovery and remote control for smart TVs",
                "Integrated seamlessly with the SmartThings ecosystem",
            ],
        },
        {
            "id": "project-3",
            "title": "Bottani",
            "description": (
                "A smart agriculture app integrated with IoT devices to monitor soil "
                "parameters in real time."
            ),
            "technologies": ["Swift", "SwiftUI", "IoT", "Core Data", "Bluetooth"],
            "category": "mobile",
            "startDate": "2022-08-01",
            "endDate": "2022-12-31",
            "isActive": False,
            "achievements": ["Integrated IoT devices for real-time soil monitoring"],
        },
        {
            "id": "project-4",
            "title": "Kabisa",
            "description": (
                "An educational app introducing Sundanese script through game-based learning."
            ),
            "technologies": ["Swift", "SwiftUI", "Game Development"],
            "category": "mobile",
            "startDate": "2023-01-01",
            "endDate": "2023-12-31",
            "isActive": False,
            "githubUrl": "https://github.com/rickychen930/kabisa",
            "achievements": ["Presented research at academic forums and published in IEEE"],
        },
        {
            "id": "project-5",
            "title": "M-arkir",
            "description": "A license plate recognition system using Python and OpenCV.",
            "technologies": ["Python", "OpenCV", "Arduino", "C++", "Computer Vision"],
            "category": "ai",
            "startDate": "2022-01-01",
            "endDate": "2022-06-30",
            "isActive": False,
            "achievements": ["Implemented real-time license plate recognition using OpenCV"],
        },
    ],
    "softSkills": [],
    "stats": [],
    "technicalSkills": [],
    "testimonials": [],
}


def fallback_payload(path: str | Path | None = None) -> dict[str, Any]:
    """Get a fresh copy of the fallback payload.

    Args:
        path: Optional JSON file overriding the built-in profile.

    Returns:
        A payload dict with ``createdAt``/``updatedAt`` set to now if absent.

    Raises:
        ProfileValidationError: If the override file cannot be read or parsed.
    """
    if path is None:
        payload = copy.deepcopy(_FALLBACK_PROFILE)
    else:
        try:
            payload = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log.error("fallback_profile_load_failed", path=str(path), error=str(e))
            raise ProfileValidationError(f"Could not load fallback profile from {path}: {e}") from e
        if not isinstance(payload, dict):
            raise ProfileValidationError(f"Fallback profile in {path} must be a JSON object")

    now = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    payload.setdefault("createdAt", now)
    payload.setdefault("updatedAt", now)
    return payload
