import logging
from typing import Dict, Iterable, List

from .models import GameEntry, USER_FIELDS

logger = logging.getLogger(__name__)

def remove_duplicates(games: Iterable[GameEntry]) -> List[GameEntry]:
    seen = set()
    out: List[GameEntry] = []
    for g in games:
        key = (g.name, g.path)
        if key in seen:
            continue
        seen.add(key)
        out.append(g)
    return out

def merge_with_persisted(fresh: Iterable[GameEntry], persisted: Iterable) -> List[GameEntry]:
    """
    Copy user-owned fields from the previously saved entries onto the fresh
    ones with the same id. The returned list is what should be saved next;
    saved entries that were not found again are left out.
    """
    index: Dict[str, GameEntry] = {}
    for p in persisted:
        if isinstance(p, dict):
            p = GameEntry.from_dict(p)
        index[p.id] = p

    out: List[GameEntry] = []
    carried = 0
    for g in fresh:
        old = index.get(g.id)
        if old is not None:
            for attr in USER_FIELDS:
                setattr(g, attr, getattr(old, attr))
            carried += 1
        out.append(g)

    logger.debug("merge: %d fresh, %d carried over, %d dropped",
                 len(out), carried, len(index) - carried)
    return out
