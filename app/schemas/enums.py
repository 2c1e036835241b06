from __future__ import annotations

"""
Central enum definitions used across KinoAdmin.

Design notes
------------
• All enums subclass `str, PyEnum` for JSON-friendly serialization.
• VALUE STRINGS are **stable** once deployed (DB enums depend on them).
"""

from enum import Enum as PyEnum
from typing import FrozenSet, Optional


# ──────────────────────────────────────────────────────────────
# Auth
# ──────────────────────────────────────────────────────────────
class UserRole(str, PyEnum):
    """Account trust tier. Only ADMIN and SUPERADMIN may mutate the catalog."""
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


ADMIN_ROLES: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.SUPERADMIN})
SUPERADMIN_ROLES: FrozenSet[UserRole] = frozenset({UserRole.SUPERADMIN})


# ──────────────────────────────────────────────────────────────
# Media
# ──────────────────────────────────────────────────────────────
class VideoQuality(str, PyEnum):
    """Resolution tier of an attached movie file."""
    P240 = "P240"
    P360 = "P360"
    P480 = "P480"
    P720 = "P720"
    P1080 = "P1080"
    P4K = "P4K"

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["VideoQuality"]:
        """Map a client label (`"720p"`, `"4K"`, …) to a tier; None if unknown."""
        if label is None:
            return None
        return _QUALITY_LABELS.get(str(label).strip().lower())


_QUALITY_LABELS = {
    "240p": VideoQuality.P240,
    "360p": VideoQuality.P360,
    "480p": VideoQuality.P480,
    "720p": VideoQuality.P720,
    "1080p": VideoQuality.P1080,
    "4k": VideoQuality.P4K,
}


__all__ = [
    "UserRole",
    "ADMIN_ROLES",
    "SUPERADMIN_ROLES",
    "VideoQuality",
]
