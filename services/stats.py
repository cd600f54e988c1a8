# services/stats.py
"""
Dashboard Statistics

Aggregates an assessment/helper snapshot into the numbers shown on the
coordination dashboard, and filters assessments for the map view.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from models.base import GigStatus, GigType, SeverityTier
from models.model import Assessment, Gig, Helper
from services.matcher import derive_needs

HIGH_PRIORITY_TIERS = (SeverityTier.CRITICAL, SeverityTier.HIGH)

# Dashboard name for the synthetic "sick" need
_NEED_SUMMARY_NAMES = {"sick": "sick_person"}

_TIERS_BY_NAME = {tier.value.lower(): tier for tier in SeverityTier}


@dataclass
class DashboardStats:
    """Snapshot aggregates for the coordination dashboard"""
    total_reports: int
    severity_distribution: Dict[SeverityTier, int]
    needs_summary: Dict[str, int]
    area_counts: Dict[str, int]
    high_priority_count: int
    active_helpers_count: int
    high_priority: List[Assessment] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "total_reports": self.total_reports,
            "severity_distribution": {t.value: n for t, n in self.severity_distribution.items()},
            "needs_summary": dict(self.needs_summary),
            "area_counts": dict(self.area_counts),
            "high_priority_count": self.high_priority_count,
            "active_helpers_count": self.active_helpers_count,
            "high_priority_ids": [a.id for a in self.high_priority],
        }

    def top_needs(self, n: int = 8) -> List[tuple]:
        """Most frequent needs, largest first"""
        return sorted(self.needs_summary.items(), key=lambda kv: (-kv[1], kv[0]))[:n]


def is_high_priority(assessment: Assessment) -> bool:
    """Critical or High and not yet verified"""
    return assessment.severity in HIGH_PRIORITY_TIERS and not assessment.verified


def compute_dashboard_stats(
    assessments: Sequence[Assessment],
    helpers: Iterable[Helper],
    high_priority_limit: int = 10,
) -> DashboardStats:
    """
    Aggregate a snapshot for the dashboard

    Args:
        assessments: Assessments in display order (newest first from the store)
        helpers: Registered helpers; only active ones are counted
        high_priority_limit: Size of the high-priority list

    Returns:
        DashboardStats
    """
    severity_distribution = {tier: 0 for tier in SeverityTier}
    needs_summary: Dict[str, int] = {}
    area_counts: Dict[str, int] = {}
    high_priority = []

    for assessment in assessments:
        severity_distribution[assessment.severity] += 1

        for need in derive_needs(assessment):
            name = _NEED_SUMMARY_NAMES.get(need, need)
            needs_summary[name] = needs_summary.get(name, 0) + 1

        if assessment.area:
            area_counts[assessment.area] = area_counts.get(assessment.area, 0) + 1

        if is_high_priority(assessment):
            high_priority.append(assessment)

    return DashboardStats(
        total_reports=len(assessments),
        severity_distribution=severity_distribution,
        needs_summary=needs_summary,
        area_counts=area_counts,
        high_priority_count=len(high_priority),
        active_helpers_count=sum(1 for h in helpers if h.active),
        high_priority=high_priority[:high_priority_limit],
    )


def summarize_counts(
    assessments: Sequence[Assessment], gigs: Iterable[Gig] = ()
) -> Dict[str, int]:
    """Headline counts for the public landing page; only active gigs are counted"""
    active_gigs = [g for g in gigs if g.status is GigStatus.ACTIVE]
    return {
        "assessments": len(assessments),
        "donations": sum(1 for g in active_gigs if g.gig_type is GigType.DONATE),
        "collections": sum(1 for g in active_gigs if g.gig_type is GigType.COLLECT),
        "total_gigs": len(active_gigs),
        "critical_cases": sum(
            1 for a in assessments
            if a.severity is SeverityTier.CRITICAL and not a.verified
        ),
    }


def _tier(value) -> SeverityTier:
    if isinstance(value, SeverityTier):
        return value
    key = str(value).strip().lower()
    if key not in _TIERS_BY_NAME:
        raise ValueError(f"Unknown severity tier: {value!r}")
    return _TIERS_BY_NAME[key]


def filter_assessments(
    assessments: Iterable[Assessment],
    severity: Optional[Iterable[SeverityTier]] = None,
    needs: Optional[Iterable[str]] = None,
    verified: Optional[bool] = None,
    area: Optional[str] = None,
) -> List[Assessment]:
    """
    Map-view filter. Empty or None criteria do not filter.

    Args:
        severity: Keep assessments in any of these tiers (names are case-insensitive)
        needs: Keep assessments with any of these derived needs
        verified: Keep assessments with this verification flag
        area: Keep assessments in this area (case-insensitive)
    """
    tiers = {_tier(s) for s in severity} if severity else None
    wanted_needs = {n.strip().lower() for n in needs} if needs else None
    area_key = area.strip().lower() if area else None

    result = []
    for a in assessments:
        if tiers and a.severity not in tiers:
            continue
        if wanted_needs and not (derive_needs(a) & wanted_needs):
            continue
        if verified is not None and a.verified != verified:
            continue
        if area_key and (a.area or "").strip().lower() != area_key:
            continue
        result.append(a)
    return result
