"""
Record Store
Holds assessment, helper, match and gig records for the collaborator services
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple
import asyncio
import uuid

import structlog

from models.base import GigStatus, GigType, MatchStatus
from models.model import Assessment, Gig, GigContact, Helper, Match
from services.exceptions import RecordNotFoundError

logger = structlog.get_logger(__name__)


class RecordStore(ABC):
    """Async interface the intake and match services persist through"""

    # ----- assessments -----

    @abstractmethod
    async def insert_assessment(self, assessment: Assessment) -> Assessment:
        ...

    @abstractmethod
    async def get_assessment(self, assessment_id: str) -> Optional[Assessment]:
        ...

    @abstractmethod
    async def list_assessments(self, verified: Optional[bool] = None) -> List[Assessment]:
        """Assessments newest first, optionally filtered by verification flag"""
        ...

    @abstractmethod
    async def update_assessment(self, assessment: Assessment) -> Assessment:
        ...

    # ----- helpers -----

    @abstractmethod
    async def insert_helper(self, helper: Helper) -> Helper:
        ...

    @abstractmethod
    async def get_helper(self, helper_id: str) -> Optional[Helper]:
        ...

    @abstractmethod
    async def list_helpers(self, active_only: bool = True) -> List[Helper]:
        ...

    @abstractmethod
    async def update_helper(self, helper: Helper) -> Helper:
        ...

    # ----- matches -----

    @abstractmethod
    async def save_match(self, match: Match) -> Match:
        """Insert or replace the match for its (helper, assessment) pair"""
        ...

    @abstractmethod
    async def list_matches(self, helper_id: str) -> List[Match]:
        ...

    @abstractmethod
    async def update_match_status(self, match_id: str, status: MatchStatus) -> Match:
        ...

    # ----- gigs -----

    @abstractmethod
    async def insert_gig(self, gig: Gig) -> Gig:
        ...

    @abstractmethod
    async def get_gig(self, gig_id: str) -> Optional[Gig]:
        ...

    @abstractmethod
    async def list_gigs(
        self,
        gig_type: Optional[GigType] = None,
        status: Optional[GigStatus] = GigStatus.ACTIVE,
    ) -> List[Gig]:
        """Gigs newest first; ``status=None`` lists every status"""
        ...

    @abstractmethod
    async def update_gig(self, gig: Gig) -> Gig:
        ...

    @abstractmethod
    async def insert_gig_contact(self, contact: GigContact) -> GigContact:
        ...

    @abstractmethod
    async def list_gig_contacts(self, gig_id: str) -> List[GigContact]:
        ...


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed store, safe for concurrent use from one event loop"""

    def __init__(self):
        self._assessments: Dict[str, Assessment] = {}
        self._helpers: Dict[str, Helper] = {}
        self._matches: Dict[Tuple[str, str], Match] = {}
        self._gigs: Dict[str, Gig] = {}
        self._gig_contacts: List[GigContact] = []
        # Created on first use so it belongs to the loop that runs the store
        self._lock: Optional[asyncio.Lock] = None

    @property
    def lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def insert_assessment(self, assessment: Assessment) -> Assessment:
        async with self.lock:
            self._assessments[assessment.id] = assessment
        logger.info("Assessment stored", assessment_id=assessment.id, severity=assessment.severity.value)
        return assessment

    async def get_assessment(self, assessment_id: str) -> Optional[Assessment]:
        return self._assessments.get(assessment_id)

    async def list_assessments(self, verified: Optional[bool] = None) -> List[Assessment]:
        records = [
            a for a in self._assessments.values()
            if verified is None or a.verified == verified
        ]
        return sorted(records, key=lambda a: a.created_at, reverse=True)

    async def update_assessment(self, assessment: Assessment) -> Assessment:
        async with self.lock:
            if assessment.id not in self._assessments:
                raise RecordNotFoundError("Assessment", assessment.id)
            self._assessments[assessment.id] = assessment
        return assessment

    async def insert_helper(self, helper: Helper) -> Helper:
        async with self.lock:
            self._helpers[helper.id] = helper
        logger.info("Helper stored", helper_id=helper.id, radius_km=helper.radius_km)
        return helper

    async def get_helper(self, helper_id: str) -> Optional[Helper]:
        return self._helpers.get(helper_id)

    async def list_helpers(self, active_only: bool = True) -> List[Helper]:
        return [h for h in self._helpers.values() if h.active or not active_only]

    async def update_helper(self, helper: Helper) -> Helper:
        async with self.lock:
            if helper.id not in self._helpers:
                raise RecordNotFoundError("Helper", helper.id)
            self._helpers[helper.id] = helper
        return helper

    async def save_match(self, match: Match) -> Match:
        async with self.lock:
            existing = self._matches.get(match.pair_key)
            match_id = match.id or (existing.id if existing else None) or str(uuid.uuid4())
            stored = match.model_copy(update={"id": match_id})
            self._matches[match.pair_key] = stored
        return stored

    async def list_matches(self, helper_id: str) -> List[Match]:
        return [m for (h_id, _), m in self._matches.items() if h_id == helper_id]

    async def update_match_status(self, match_id: str, status: MatchStatus) -> Match:
        async with self.lock:
            for key, m in self._matches.items():
                if m.id == match_id:
                    updated = m.model_copy(update={"status": status})
                    self._matches[key] = updated
                    return updated
        raise RecordNotFoundError("Match", match_id)

    async def insert_gig(self, gig: Gig) -> Gig:
        async with self.lock:
            self._gigs[gig.id] = gig
        logger.info("Gig stored", gig_id=gig.id, gig_type=gig.gig_type.value)
        return gig

    async def get_gig(self, gig_id: str) -> Optional[Gig]:
        return self._gigs.get(gig_id)

    async def list_gigs(
        self,
        gig_type: Optional[GigType] = None,
        status: Optional[GigStatus] = GigStatus.ACTIVE,
    ) -> List[Gig]:
        records = [
            g for g in self._gigs.values()
            if (gig_type is None or g.gig_type == gig_type)
            and (status is None or g.status == status)
        ]
        return sorted(records, key=lambda g: g.created_at, reverse=True)

    async def update_gig(self, gig: Gig) -> Gig:
        async with self.lock:
            if gig.id not in self._gigs:
                raise RecordNotFoundError("Gig", gig.id)
            self._gigs[gig.id] = gig
        return gig

    async def insert_gig_contact(self, contact: GigContact) -> GigContact:
        async with self.lock:
            self._gig_contacts.append(contact)
        return contact

    async def list_gig_contacts(self, gig_id: str) -> List[GigContact]:
        return [c for c in self._gig_contacts if c.gig_id == gig_id]
