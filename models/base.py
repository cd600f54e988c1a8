"""
Shared base models and enums for Relief Triage
Used by assessment, helper and match records
"""

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


# ============= Enums =============

class SeverityTier(str, Enum):
    """Triage tier of an assessment, ordered LOW < MODERATE < HIGH < CRITICAL"""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def weight(self) -> int:
        return _SEVERITY_WEIGHTS[self]

    def __lt__(self, other):
        if not isinstance(other, SeverityTier):
            return NotImplemented
        return self.weight < other.weight

    def __le__(self, other):
        if not isinstance(other, SeverityTier):
            return NotImplemented
        return self.weight <= other.weight

    def __gt__(self, other):
        if not isinstance(other, SeverityTier):
            return NotImplemented
        return self.weight > other.weight

    def __ge__(self, other):
        if not isinstance(other, SeverityTier):
            return NotImplemented
        return self.weight >= other.weight


_SEVERITY_WEIGHTS = {
    SeverityTier.LOW: 1,
    SeverityTier.MODERATE: 2,
    SeverityTier.HIGH: 3,
    SeverityTier.CRITICAL: 4,
}


class WaterIntrusion(str, Enum):
    """How much water entered the home"""
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


class RemainOnSite(str, Enum):
    """Whether the household can keep living at home"""
    YES = "yes"
    NO = "no"
    UNSURE = "unsure"


class PowerStatus(str, Enum):
    """Electricity supply at the home"""
    WORKING = "working"
    INTERMITTENT = "intermittent"
    NONE = "none"


class HelperOffering(str, Enum):
    """Capability tags a helper can declare at registration"""
    FOOD = "food"
    WATER = "water"
    TEMPORARY_SHELTER = "temporary-shelter"
    TRANSPORT = "transport"
    DRY_RATIONS = "dry-rations"
    CLEANUP_SUPPORT = "cleanup-support"
    MEDICINE_PICKUP = "medicine-pickup"
    CHARGING_SUPPORT = "charging-support"


class MatchStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    COMPLETED = "completed"


class GigType(str, Enum):
    """Supply board post direction: giving supplies away or asking for them"""
    DONATE = "donate"
    COLLECT = "collect"


class GigStatus(str, Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    CLOSED = "closed"


class PosterType(str, Enum):
    INDIVIDUAL = "individual"
    NGO = "ngo"
    ORGANIZATION = "organization"


class SupplyType(str, Enum):
    FOOD = "food"
    WATER = "water"
    CLOTHES = "clothes"
    MEDICINE = "medicine"
    BLANKETS = "blankets"
    TOILETRIES = "toiletries"
    BABY_ITEMS = "baby-items"
    COOKING_ITEMS = "cooking-items"
    CLEANING_SUPPLIES = "cleaning-supplies"
    OTHER = "other"


class ContactMethod(str, Enum):
    PHONE = "phone"
    EMAIL = "email"
    VISIT = "visit"


# Vocabulary used by the public assessment form, keyed by form field name
WATER_INTRUSION_ALIASES = {
    "yes": WaterIntrusion.FULL,
    "partially": WaterIntrusion.PARTIAL,
    "no": WaterIntrusion.NONE,
}

POWER_STATUS_ALIASES = {
    "yes": PowerStatus.WORKING,
    "sometimes": PowerStatus.INTERMITTENT,
    "no": PowerStatus.NONE,
}

FORM_FIELD_NAMES = {
    "water_intrusion": "water_inside",
    "can_remain_on_site": "can_stay_home",
    "power_status": "electricity_working",
}


# ============= Coordinate =============

class Coordinate(BaseModel):
    """WGS-84 point in degrees"""
    latitude: float
    longitude: float

    model_config = ConfigDict(frozen=True)

    @field_validator("latitude", "longitude")
    @classmethod
    def check_finite(cls, v):
        if not math.isfinite(v):
            raise ValueError("Coordinate components must be finite")
        return v


# ============= Validation Helpers =============

def validate_coordinates(lat: float, lon: float) -> bool:
    """Validate coordinate ranges"""
    return -90 <= lat <= 90 and -180 <= lon <= 180


def normalize_answer(value):
    """Trim and lowercase a form answer; non-string values pass through"""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return value.strip().lower()
    return value


def normalize_tags(v) -> frozenset:
    """Lowercased, de-duplicated tag set from a string or an iterable of tags"""
    if v is None:
        return frozenset()
    if isinstance(v, (str, Enum)):
        v = [v]
    try:
        tags = [normalize_answer(item) for item in v]
    except TypeError:
        raise ValueError(f"Expected a list of tags, got {type(v).__name__}")
    tags = (str(tag).strip().lower() for tag in tags)
    return frozenset(tag for tag in tags if tag)
