"""
Match Service
Answers "which cases should this helper look at now?" from a store snapshot
"""
from typing import List

from models.base import MatchStatus
from models.model import Match
from services.base_service import BaseService
from services.matcher import match
from services.reconciliation import reconcile_matches


class MatchService(BaseService):
    """Runs the matcher against the record store and tracks contact progress"""

    async def find_matches(self, helper_id: str) -> List[Match]:
        """
        Current ranked cases for a helper

        Unknown or inactive helpers get an empty list. Stored status of
        previously contacted cases is kept.
        """
        helper = await self.store.get_helper(helper_id)
        if helper is None:
            self._log_operation("find_matches", {"helper_id": helper_id, "reason": "unknown_helper"}, level="warning")
            return []
        if not helper.active:
            return []

        assessments = await self.store.list_assessments()
        fresh = match(helper, assessments)
        persisted = await self.store.list_matches(helper_id)
        matches = reconcile_matches(fresh, persisted)

        self._log_operation("find_matches", {
            "helper_id": helper_id,
            "snapshot_size": len(assessments),
            "returned": len(matches),
        })
        return matches

    async def _set_status(self, m: Match, status: MatchStatus) -> Match:
        if m.id is not None:
            updated = await self.store.update_match_status(m.id, status)
        else:
            updated = await self.store.save_match(m.model_copy(update={"status": status}))
        self._log_operation("set_status", {
            "match_id": updated.id,
            "helper_id": updated.helper_id,
            "assessment_id": updated.assessment_id,
            "status": status.value,
        })
        return updated

    async def mark_contacted(self, m: Match) -> Match:
        return await self._set_status(m, MatchStatus.CONTACTED)

    async def mark_completed(self, m: Match) -> Match:
        return await self._set_status(m, MatchStatus.COMPLETED)
