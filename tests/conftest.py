import math

import pytest

from config import Settings
from models.base import Coordinate
from models.model import Assessment, Gig, Helper
from services.record_store import InMemoryRecordStore
from services.severity import classify

COLOMBO = Coordinate(latitude=6.9271, longitude=79.8612)

# Kilometers per degree of latitude on the 6371 km sphere
KM_PER_DEGREE = math.pi * 6371.0 / 180.0


def north_of(origin: Coordinate, km: float) -> Coordinate:
    """Point `km` kilometers due north of `origin`"""
    return Coordinate(latitude=origin.latitude + km / KM_PER_DEGREE, longitude=origin.longitude)


@pytest.fixture
def colombo():
    return COLOMBO


@pytest.fixture
def north():
    return north_of


@pytest.fixture
def make_assessment():
    """Factory for assessments; severity is classified unless given"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id": f"assessment-{counter['n']}",
            "name": "Test Household",
            "phone": "+94770000000",
            "household_size": 4,
            "location": COLOMBO,
        }
        data.update(overrides)
        if "severity" not in data:
            data["severity"] = classify(data)
        return Assessment(**data)

    return _make


@pytest.fixture
def make_helper():
    """Factory for helpers based in Colombo with a 10 km radius"""
    def _make(**overrides):
        data = {
            "id": "helper-1",
            "name": "Test Helper",
            "phone": "+94771111111",
            "offerings": ["food"],
            "capacity": 5,
            "radius_km": 10,
            "location": COLOMBO,
        }
        data.update(overrides)
        return Helper(**data)

    return _make


@pytest.fixture
def make_gig():
    """Factory for active supply board gigs posted from Colombo"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id": f"gig-{counter['n']}",
            "gig_type": "donate",
            "name": "Test Donor",
            "phone": "+94772222222",
            "supplies": ["food"],
            "quantity_description": "20 packets of rice",
            "location": COLOMBO,
        }
        data.update(overrides)
        return Gig(**data)

    return _make


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def test_settings():
    """Settings with geocoding retries that do not sleep"""
    return Settings(
        geocoding_max_attempts=2,
        geocoding_retry_min_wait_seconds=0,
    )


@pytest.fixture
def sample_submission():
    """Raw form submission as posted by the assessment form"""
    return {
        "name": "Nimal Perera",
        "phone": "+94771234567",
        "family_size": 5,
        "water_inside": "yes",
        "can_stay_home": "no",
        "electricity_working": "no",
        "damaged_items": ["food", "electronics"],
        "has_elderly": True,
        "has_children": False,
        "has_sick_person": False,
        "special_notes": "Ground floor flooded",
        "photos": ["uploads/abc.jpg"],
        "location": {"lat": 6.9271, "lng": 79.8612},
        "area": "Kolonnawa",
    }
