"""
Relief Triage Data Models
Centralized export of all Pydantic models
"""

# Base models and enums
from .base import (
    SeverityTier,
    WaterIntrusion,
    RemainOnSite,
    PowerStatus,
    HelperOffering,
    MatchStatus,
    GigType,
    GigStatus,
    PosterType,
    SupplyType,
    ContactMethod,
    Coordinate,
    validate_coordinates
)

# Records
from .model import (
    AssessmentAnswers,
    Assessment,
    Helper,
    Match,
    Gig,
    GigContact
)

__all__ = [
    # Base
    "SeverityTier",
    "WaterIntrusion",
    "RemainOnSite",
    "PowerStatus",
    "HelperOffering",
    "MatchStatus",
    "GigType",
    "GigStatus",
    "PosterType",
    "SupplyType",
    "ContactMethod",
    "Coordinate",
    "validate_coordinates",

    # Records
    "AssessmentAnswers",
    "Assessment",
    "Helper",
    "Match",
    "Gig",
    "GigContact",
]
