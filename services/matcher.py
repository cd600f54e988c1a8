# services/matcher.py
"""
Helper/Assessment Matcher

Ranks open assessments for one helper:

1. Keep assessments with a precise location inside the helper's radius
2. Order by severity (Critical first), then by distance (nearest first)
3. Score each candidate out of 100:
   - severity: tier weight x 10        (10-40)
   - distance: linear decay to radius  (0-30)
   - needs:    share of needs covered   (0-30)
4. Return the first MAX_MATCHES of that order

The order, not the score, decides which cases are returned, so urgency and
proximity gate what a helper sees first.
"""

from typing import FrozenSet, Iterable, List, Mapping, Sequence, Tuple

import structlog

from models.base import HelperOffering, SeverityTier
from models.model import Assessment, Helper, Match
from services.geo import distance

logger = structlog.get_logger(__name__)

MAX_MATCHES = 10

SEVERITY_POINTS_PER_WEIGHT = 10
MAX_DISTANCE_POINTS = 30.0
MAX_NEED_POINTS = 30.0

# Needs derived from damaged items and vulnerable people -> offerings that cover them
NEED_TO_OFFERINGS: Mapping[str, FrozenSet[HelperOffering]] = {
    "food": frozenset({HelperOffering.FOOD, HelperOffering.DRY_RATIONS}),
    "furniture": frozenset({HelperOffering.CLEANUP_SUPPORT}),
    "documents": frozenset({HelperOffering.CLEANUP_SUPPORT}),
    "electronics": frozenset({HelperOffering.CHARGING_SUPPORT}),
    "other": frozenset({HelperOffering.CLEANUP_SUPPORT}),
    "elderly": frozenset({HelperOffering.MEDICINE_PICKUP, HelperOffering.FOOD}),
    "children": frozenset({HelperOffering.FOOD, HelperOffering.WATER}),
    "sick": frozenset({HelperOffering.MEDICINE_PICKUP, HelperOffering.TRANSPORT}),
}


def derive_needs(assessment: Assessment) -> FrozenSet[str]:
    """Damaged-item categories plus one need per vulnerable group present"""
    needs = set(assessment.damaged_items)
    if assessment.has_elderly:
        needs.add("elderly")
    if assessment.has_children:
        needs.add("children")
    if assessment.has_sick_person:
        needs.add("sick")
    return frozenset(needs)


def need_match_ratio(offerings: Iterable[HelperOffering], needs: Iterable[str]) -> float:
    """Share of needs that at least one offering covers (0.0 when there are no needs)"""
    needs = set(needs)
    if not needs:
        return 0.0
    offered = set(offerings)
    matched = sum(1 for need in needs if NEED_TO_OFFERINGS.get(need, frozenset()) & offered)
    return matched / len(needs)


def score_match(helper: Helper, assessment: Assessment, distance_km: float) -> int:
    """Composite match score in [0, 100]"""
    severity_component = assessment.severity.weight * SEVERITY_POINTS_PER_WEIGHT
    distance_component = max(0.0, MAX_DISTANCE_POINTS * (1 - distance_km / helper.radius_km))
    need_component = MAX_NEED_POINTS * need_match_ratio(helper.offerings, derive_needs(assessment))
    return round(severity_component + distance_component + need_component)


def _candidates(helper: Helper, assessments: Iterable[Assessment]) -> List[Tuple[Assessment, float]]:
    nearby = []
    skipped = 0
    for assessment in assessments:
        if assessment.location is None:
            skipped += 1
            continue
        d = distance(helper.location, assessment.location)
        if d <= helper.radius_km:
            nearby.append((assessment, d))

    if skipped:
        logger.debug("Skipped assessments without location", helper_id=helper.id, count=skipped)
    return nearby


def match(helper: Helper, assessments: Sequence[Assessment]) -> List[Match]:
    """
    Rank assessments for a helper.

    Args:
        helper: The helper requesting cases
        assessments: Snapshot of open assessments

    Returns:
        Up to MAX_MATCHES pending matches, most urgent first. Empty when the
        helper is inactive or has no location.
    """
    if not helper.active or helper.location is None:
        return []

    nearby = _candidates(helper, assessments)
    # sorted() is stable: equal severity and distance keep snapshot order
    nearby = sorted(nearby, key=lambda pair: (-pair[0].severity.weight, pair[1]))

    matches = [
        Match(
            helper_id=helper.id,
            assessment_id=assessment.id,
            match_score=score_match(helper, assessment, d),
            distance_km=d,
        )
        for assessment, d in nearby[:MAX_MATCHES]
    ]

    logger.debug(
        "Matches computed",
        helper_id=helper.id,
        candidates=len(nearby),
        returned=len(matches),
        critical=sum(1 for a, _ in nearby if a.severity is SeverityTier.CRITICAL),
    )
    return matches
