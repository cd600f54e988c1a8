"""
Overlay persisted match state onto freshly computed matches.
"""
from typing import Iterable, List

from models.model import Match


def reconcile_matches(fresh: Iterable[Match], persisted: Iterable[Match]) -> List[Match]:
    """
    Carry stored ``id`` and ``status`` over to fresh matches of the same pair.

    Order, score and distance come from ``fresh``; persisted matches whose
    pair is no longer a candidate are dropped.
    """
    by_pair = {m.pair_key: m for m in persisted}
    merged = []
    for m in fresh:
        existing = by_pair.get(m.pair_key)
        if existing is None:
            merged.append(m)
        else:
            merged.append(m.model_copy(update={"id": existing.id or m.id, "status": existing.status}))
    return merged
