from pydantic import BaseModel, AliasChoices, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, FrozenSet, Optional, Tuple
from datetime import datetime
import uuid

# Import shared base models
from .base import (
    ContactMethod,
    Coordinate,
    GigStatus,
    GigType,
    HelperOffering,
    MatchStatus,
    PosterType,
    PowerStatus,
    RemainOnSite,
    SeverityTier,
    SupplyType,
    WaterIntrusion,
    WATER_INTRUSION_ALIASES,
    POWER_STATUS_ALIASES,
    FORM_FIELD_NAMES,
    normalize_answer,
    normalize_tags,
)

ANSWER_FIELDS = (
    "water_intrusion", "can_remain_on_site", "power_status",
    "has_elderly", "has_children", "has_sick_person",
)


class AssessmentAnswers(BaseModel):
    """Situational answers that drive severity classification.

    Form vocabulary (``water_inside``, ``can_stay_home``, ``electricity_working``
    with yes/no/partially/sometimes values) is accepted and translated to the
    canonical enums. Unanswered questions default to their least-severe value.
    """
    water_intrusion: WaterIntrusion = WaterIntrusion.NONE
    can_remain_on_site: RemainOnSite = RemainOnSite.YES
    power_status: PowerStatus = PowerStatus.WORKING
    damaged_items: FrozenSet[str] = Field(default_factory=frozenset)
    has_elderly: bool = False
    has_children: bool = False
    has_sick_person: bool = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def translate_form_fields(cls, data: Any):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field, form_field in FORM_FIELD_NAMES.items():
            if data.get(field) is None and form_field in data:
                data[field] = data.pop(form_field)
        # Answers are read case-insensitively, the same way the classifier reads them
        for field in ANSWER_FIELDS:
            if data.get(field) is None:
                data.pop(field, None)
            else:
                data[field] = normalize_answer(data[field])
        water = data.get("water_intrusion")
        if isinstance(water, str) and water in WATER_INTRUSION_ALIASES:
            data["water_intrusion"] = WATER_INTRUSION_ALIASES[water]
        power = data.get("power_status")
        if isinstance(power, str) and power in POWER_STATUS_ALIASES:
            data["power_status"] = POWER_STATUS_ALIASES[power]
        return data

    @field_validator("damaged_items", mode="before")
    @classmethod
    def normalize_damaged_items(cls, v):
        return normalize_tags(v)


class Assessment(AssessmentAnswers):
    """A household's disaster-impact report with its stamped severity tier"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    household_size: int = Field(
        ..., gt=0, validation_alias=AliasChoices("household_size", "family_size")
    )
    special_notes: Optional[str] = Field(None, max_length=2000)
    photos: Tuple[str, ...] = ()
    location: Optional[Coordinate] = None
    approximate_location: Optional[Coordinate] = None
    area: Optional[str] = None
    severity: SeverityTier
    verified: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "name": "Nimal Perera",
                "phone": "+94771234567",
                "family_size": 4,
                "water_intrusion": "full",
                "can_remain_on_site": "no",
                "power_status": "none",
                "damaged_items": ["food", "electronics"],
                "has_elderly": True,
                "location": {"latitude": 6.9271, "longitude": 79.8612},
                "area": "Kolonnawa",
                "severity": "Critical",
            }
        }
    )


class Helper(BaseModel):
    """A registered aid provider"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = None
    offerings: FrozenSet[HelperOffering] = Field(default_factory=frozenset)
    capacity: int = Field(1, ge=0)
    radius_km: float = Field(..., gt=0)
    location: Optional[Coordinate] = None
    available_times: Optional[Dict[str, Any]] = None
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("offerings", mode="before")
    @classmethod
    def normalize_offerings(cls, v):
        return normalize_tags(v)


class Match(BaseModel):
    """Ranked pairing of one helper with one assessment"""
    id: Optional[str] = None
    helper_id: str
    assessment_id: str
    match_score: int = Field(..., ge=0, le=100)
    status: MatchStatus = MatchStatus.PENDING
    distance_km: float = Field(..., ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(frozen=True)

    @property
    def pair_key(self) -> Tuple[str, str]:
        return (self.helper_id, self.assessment_id)


class Gig(BaseModel):
    """A supply board post: someone donating supplies or asking to collect them"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    gig_type: GigType
    poster_type: PosterType = Field(
        PosterType.INDIVIDUAL, validation_alias=AliasChoices("poster_type", "user_type")
    )
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = None
    organization_name: Optional[str] = Field(None, max_length=200)
    supplies: FrozenSet[SupplyType] = Field(..., min_length=1)
    quantity_description: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    location: Coordinate
    approximate_location: Optional[Coordinate] = None
    area: Optional[str] = None
    can_deliver: bool = False
    delivery_radius_km: Optional[float] = Field(None, gt=0)
    pickup_available: bool = False
    preferred_contact: ContactMethod = ContactMethod.PHONE
    status: GigStatus = GigStatus.ACTIVE
    contact_count: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    @field_validator("supplies", mode="before")
    @classmethod
    def normalize_supplies(cls, v):
        return normalize_tags(v)


class GigContact(BaseModel):
    """One recorded contact attempt on a gig"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    gig_id: str
    contacted_by: str = Field(..., min_length=1, max_length=200)
    contact_type: ContactMethod = ContactMethod.PHONE
    notes: Optional[str] = Field(None, max_length=1000)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)
