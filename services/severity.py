# services/severity.py
"""
Severity Classifier

Turns the answers of one damage assessment into a severity tier.

Scoring is additive (water, ability to stay, electricity, damaged items,
vulnerable people), followed by tier thresholds with categorical overrides:
a home with water fully inside that cannot be lived in is always Critical,
whatever else was answered.

The classifier is total. Missing or unrecognised answers count as their
least-severe value so that a half-filled form still gets a tier.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, Union

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from models.base import (
    SeverityTier,
    WaterIntrusion,
    RemainOnSite,
    PowerStatus,
    WATER_INTRUSION_ALIASES,
    POWER_STATUS_ALIASES,
    FORM_FIELD_NAMES,
    normalize_answer,
    normalize_tags,
)

logger = structlog.get_logger(__name__)

Answers = Union[Mapping, BaseModel]

# Same boolean vocabulary the record models accept (yes/y/t/on/1 ...)
_BOOL = TypeAdapter(bool)

# Points per answer (max 30 + 25 + 15 + 15 + 15 = 100)
WATER_POINTS = {
    WaterIntrusion.FULL: 30,
    WaterIntrusion.PARTIAL: 15,
    WaterIntrusion.NONE: 0,
}

REMAIN_POINTS = {
    RemainOnSite.NO: 25,
    RemainOnSite.UNSURE: 10,
    RemainOnSite.YES: 0,
}

POWER_POINTS = {
    PowerStatus.NONE: 15,
    PowerStatus.INTERMITTENT: 7,
    PowerStatus.WORKING: 0,
}

SICK_PERSON_POINTS = 15
ELDERLY_OR_CHILDREN_POINTS = 8

CRITICAL_THRESHOLD = 60
HIGH_THRESHOLD = 40
MODERATE_THRESHOLD = 20

SEVERITY_COLORS = {
    SeverityTier.CRITICAL: "#E53E3E",
    SeverityTier.HIGH: "#F56500",
    SeverityTier.MODERATE: "#F6AD00",
    SeverityTier.LOW: "#38A169",
}

SEVERITY_LABELS: Dict[SeverityTier, Dict[str, str]] = {
    SeverityTier.CRITICAL: {"en": "Critical", "si": "උත්තරීතර", "ta": "முக்கியமான"},
    SeverityTier.HIGH: {"en": "High", "si": "ඉහළ", "ta": "உயர்"},
    SeverityTier.MODERATE: {"en": "Moderate", "si": "මධ්‍යම", "ta": "மிதமான"},
    SeverityTier.LOW: {"en": "Low", "si": "අඩු", "ta": "குறைந்த"},
}


def _read(answers: Answers, field: str) -> Any:
    if isinstance(answers, Mapping):
        value = answers.get(field)
        if value is None and field in FORM_FIELD_NAMES:
            value = answers.get(FORM_FIELD_NAMES[field])
        return value
    return getattr(answers, field, None)


def _coerce(value: Any, enum_cls, aliases: Mapping, default: Enum, field: str) -> Enum:
    """Map an answer onto ``enum_cls``, falling back to the least-severe member."""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    key = normalize_answer(value)
    if not isinstance(key, str):
        key = str(key).strip().lower()
    if key in aliases:
        return aliases[key]
    try:
        return enum_cls(key)
    except ValueError:
        logger.warning(
            "Unrecognized assessment answer, using least severe value",
            field=field,
            value=str(value),
            default=default.value,
        )
        return default


def _flag(value: Any, field: str) -> bool:
    if value is None:
        return False
    try:
        return _BOOL.validate_python(normalize_answer(value))
    except ValidationError:
        logger.warning("Unrecognized yes/no answer, treating as no", field=field, value=str(value))
        return False


def _damaged_item_count(value: Any) -> int:
    try:
        return len(normalize_tags(value))
    except ValueError:
        return 0


def _normalized(answers: Answers):
    water = _coerce(_read(answers, "water_intrusion"), WaterIntrusion,
                    WATER_INTRUSION_ALIASES, WaterIntrusion.NONE, "water_intrusion")
    remain = _coerce(_read(answers, "can_remain_on_site"), RemainOnSite,
                     {}, RemainOnSite.YES, "can_remain_on_site")
    power = _coerce(_read(answers, "power_status"), PowerStatus,
                    POWER_STATUS_ALIASES, PowerStatus.WORKING, "power_status")
    return water, remain, power


def severity_points(answers: Answers) -> int:
    """Additive severity score in [0, 100]"""
    water, remain, power = _normalized(answers)
    score = WATER_POINTS[water] + REMAIN_POINTS[remain] + POWER_POINTS[power]

    n = _damaged_item_count(_read(answers, "damaged_items"))
    if n >= 4:
        score += 15
    elif n >= 2:
        score += 10
    elif n == 1:
        score += 5

    # Medical need dominates; not additive with the elderly/children bonus
    if _flag(_read(answers, "has_sick_person"), "has_sick_person"):
        score += SICK_PERSON_POINTS
    elif (_flag(_read(answers, "has_elderly"), "has_elderly")
          or _flag(_read(answers, "has_children"), "has_children")):
        score += ELDERLY_OR_CHILDREN_POINTS

    return score


def classify(answers: Answers) -> SeverityTier:
    """
    Classify an assessment into a severity tier.

    Args:
        answers: Raw form answers (mapping), an ``AssessmentAnswers`` or an
            ``Assessment``. Form field names are accepted.

    Returns:
        One of LOW, MODERATE, HIGH, CRITICAL
    """
    water, remain, _ = _normalized(answers)
    score = severity_points(answers)

    if score >= CRITICAL_THRESHOLD or (water is WaterIntrusion.FULL and remain is RemainOnSite.NO):
        tier = SeverityTier.CRITICAL
    elif score >= HIGH_THRESHOLD or water is WaterIntrusion.FULL or remain is RemainOnSite.NO:
        tier = SeverityTier.HIGH
    elif score >= MODERATE_THRESHOLD or water is WaterIntrusion.PARTIAL:
        tier = SeverityTier.MODERATE
    else:
        tier = SeverityTier.LOW

    logger.debug("Assessment classified", score=score, severity=tier.value)
    return tier


def severity_color(tier: SeverityTier) -> str:
    return SEVERITY_COLORS[tier]


def severity_label(tier: SeverityTier, lang: str = "en") -> str:
    """Display label for a tier in English, Sinhala or Tamil"""
    labels = SEVERITY_LABELS[tier]
    return labels.get(lang, labels["en"])
