from typing import Dict, Iterable, List

from .constants import SPECIFICITY_RANK, UNKNOWN_RANK
from .entries import Entry


def specificity(entry: Entry) -> int:
    """Narrowest context first; unrecognized types sort last."""
    return SPECIFICITY_RANK.get(entry.context_type, UNKNOWN_RANK)


def sort_by_specificity(entries: Iterable[Entry]) -> List[Entry]:
    # sorted() is stable, so equal keys keep their relative order
    return sorted(entries, key=lambda e: (specificity(e), e.sort_key))


def group_by_context_type(entries: Iterable[Entry]) -> Dict[str, List[Entry]]:
    """Groups entries the way the side panel lists them, each group in user order."""
    groups = {"fieldOnly": [], "url": [], "domain": [], "all": [], "pattern": []}
    for entry in entries:
        groups.get(entry.context_type, groups["pattern"]).append(entry)
    for group in groups.values():
        group.sort(key=lambda e: e.sort_key)
    return groups
