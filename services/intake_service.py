# services/intake_service.py
"""
Intake Service

Turns form submissions into stored records:
- assessments are classified once, blurred once and stored unverified
- helpers are registered active and must give a location
- verification and deactivation are the only later changes
- supply board gigs are blurred like assessments and count their contacts
"""

from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.base import (
    ContactMethod,
    Coordinate,
    GigStatus,
    GigType,
    HelperOffering,
    PosterType,
    SupplyType,
    normalize_tags,
    validate_coordinates,
)
from models.model import Assessment, AssessmentAnswers, Gig, GigContact, Helper
from services.base_service import BaseService
from services.exceptions import IntakeValidationError, RecordNotFoundError
from services.geo import blur, parse_point
from services.geocoding_service import GeocodingService
from services.severity import classify


def _read_location(v):
    if v is None:
        return None
    coord = parse_point(v)
    if coord is None:
        raise ValueError("Location must be a point with latitude and longitude")
    if not validate_coordinates(coord.latitude, coord.longitude):
        raise ValueError("Latitude must be within [-90, 90] and longitude within [-180, 180]")
    return coord


class AssessmentSubmission(AssessmentAnswers):
    """Damage assessment as submitted through the public form"""
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    household_size: int = Field(..., gt=0, alias="family_size")
    special_notes: Optional[str] = Field(None, max_length=2000)
    photos: List[str] = Field(default_factory=list)
    location: Optional[Coordinate] = None
    area: Optional[str] = Field(None, max_length=200)

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    @field_validator("location", mode="before")
    @classmethod
    def check_location(cls, v):
        return _read_location(v)


class HelperRegistration(BaseModel):
    """Helper sign-up as submitted through the registration form"""
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = None
    offerings: FrozenSet[HelperOffering] = Field(default_factory=frozenset)
    capacity: int = Field(1, ge=0)
    radius_km: float = Field(..., gt=0)
    available_times: Optional[Dict[str, Any]] = None
    location: Optional[Coordinate] = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("location", mode="before")
    @classmethod
    def check_location(cls, v):
        return _read_location(v)


class GigSubmission(BaseModel):
    """Supply board post as submitted through the gig form"""
    gig_type: GigType
    poster_type: PosterType = Field(PosterType.INDIVIDUAL, alias="user_type")
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = None
    organization_name: Optional[str] = Field(None, max_length=200)
    supplies: FrozenSet[SupplyType] = Field(..., min_length=1)
    quantity_description: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[Coordinate] = None
    area: Optional[str] = Field(None, max_length=200)
    can_deliver: bool = False
    delivery_radius_km: Optional[float] = Field(None, gt=0, alias="delivery_radius")
    pickup_available: bool = False
    preferred_contact: ContactMethod = ContactMethod.PHONE

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    @field_validator("location", mode="before")
    @classmethod
    def check_location(cls, v):
        return _read_location(v)

    @field_validator("supplies", mode="before")
    @classmethod
    def normalize_supplies(cls, v):
        return normalize_tags(v)


class IntakeService(BaseService):
    """Creates and updates assessment and helper records"""

    def __init__(self, store, settings=None, geocoder: Optional[GeocodingService] = None):
        super().__init__(store=store, settings=settings)
        self.geocoder = geocoder

    @staticmethod
    def _parse(model_cls, data):
        if isinstance(data, model_cls):
            return data
        try:
            return model_cls.model_validate(data)
        except ValidationError as e:
            raise IntakeValidationError(f"Invalid {model_cls.__name__}: {e}") from e

    async def submit_assessment(
        self, submission: Union[AssessmentSubmission, Mapping[str, Any]]
    ) -> Assessment:
        """
        Classify, blur and store a new assessment

        Args:
            submission: Form submission (model or raw mapping)

        Returns:
            The stored assessment with its severity tier

        Raises:
            IntakeValidationError: If the submission is malformed
        """
        submission = self._parse(AssessmentSubmission, submission)

        severity = classify(submission)
        approximate = None
        if submission.location is not None:
            approximate = blur(submission.location, self.settings.blur_radius_meters)

        area = submission.area
        if not area and submission.location is not None and self.geocoder is not None:
            area = await self.geocoder.reverse_geocode(submission.location)

        assessment = Assessment(
            **submission.model_dump(exclude={"area", "photos", "location"}),
            photos=tuple(submission.photos),
            location=submission.location,
            approximate_location=approximate,
            area=area,
            severity=severity,
            verified=False,
        )
        stored = await self.store.insert_assessment(assessment)

        self._log_operation("submit_assessment", {
            "assessment_id": stored.id,
            "severity": severity.value,
            "has_location": stored.location is not None,
        })
        return stored

    async def register_helper(
        self, registration: Union[HelperRegistration, Mapping[str, Any]]
    ) -> Helper:
        """
        Store a new active helper

        Raises:
            IntakeValidationError: If the registration is malformed or has no location
        """
        registration = self._parse(HelperRegistration, registration)
        if registration.location is None:
            raise IntakeValidationError("Location is required")

        helper = Helper(**registration.model_dump(), active=True)
        stored = await self.store.insert_helper(helper)

        self._log_operation("register_helper", {
            "helper_id": stored.id,
            "offerings": sorted(o.value for o in stored.offerings),
            "radius_km": stored.radius_km,
        })
        return stored

    async def verify_assessment(self, assessment_id: str, verified: bool = True) -> Assessment:
        """Set the verification flag; severity is left as stamped at intake"""
        assessment = await self.store.get_assessment(assessment_id)
        if assessment is None:
            raise RecordNotFoundError("Assessment", assessment_id)

        updated = await self.store.update_assessment(
            assessment.model_copy(update={"verified": verified})
        )
        self._log_operation("verify_assessment", {"assessment_id": assessment_id, "verified": verified})
        return updated

    async def deactivate_helper(self, helper_id: str) -> Helper:
        """Mark a helper as no longer available"""
        helper = await self.store.get_helper(helper_id)
        if helper is None:
            raise RecordNotFoundError("Helper", helper_id)

        updated = await self.store.update_helper(helper.model_copy(update={"active": False}))
        self._log_operation("deactivate_helper", {"helper_id": helper_id})
        return updated

    async def submit_gig(self, submission: Union[GigSubmission, Mapping[str, Any]]) -> Gig:
        """
        Store a new active supply board gig

        The public listing shows only the blurred location.

        Raises:
            IntakeValidationError: If the submission is malformed or has no location
        """
        submission = self._parse(GigSubmission, submission)
        if submission.location is None:
            raise IntakeValidationError("Location is required")

        area = submission.area
        if not area and self.geocoder is not None:
            area = await self.geocoder.reverse_geocode(submission.location)

        gig = Gig(
            **submission.model_dump(exclude={"area"}),
            approximate_location=blur(submission.location, self.settings.blur_radius_meters),
            area=area,
            status=GigStatus.ACTIVE,
            contact_count=0,
        )
        stored = await self.store.insert_gig(gig)

        self._log_operation("submit_gig", {
            "gig_id": stored.id,
            "gig_type": stored.gig_type.value,
            "supplies": sorted(s.value for s in stored.supplies),
        })
        return stored

    async def record_gig_contact(
        self,
        gig_id: str,
        contacted_by: str,
        contact_type: ContactMethod = ContactMethod.PHONE,
        notes: Optional[str] = None,
    ) -> Gig:
        """Log a contact attempt and bump the gig's contact count"""
        gig = await self.store.get_gig(gig_id)
        if gig is None:
            raise RecordNotFoundError("Gig", gig_id)

        contact = self._parse(GigContact, {
            "gig_id": gig_id,
            "contacted_by": contacted_by,
            "contact_type": contact_type,
            "notes": notes,
        })
        await self.store.insert_gig_contact(contact)
        updated = await self.store.update_gig(
            gig.model_copy(update={"contact_count": gig.contact_count + 1})
        )
        self._log_operation("record_gig_contact", {"gig_id": gig_id, "contact_type": contact.contact_type.value})
        return updated

    async def set_gig_status(self, gig_id: str, status: GigStatus) -> Gig:
        """Mark a gig fulfilled or closed (or reopen it)"""
        gig = await self.store.get_gig(gig_id)
        if gig is None:
            raise RecordNotFoundError("Gig", gig_id)

        updated = await self.store.update_gig(gig.model_copy(update={"status": GigStatus(status)}))
        self._log_operation("set_gig_status", {"gig_id": gig_id, "status": updated.status.value})
        return updated
