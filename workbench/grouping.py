from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from schemas import BriefListItem

UNTITLED_LABEL = "Ohne Titel"


@dataclass
class BriefGroup:
    title: str
    latest: BriefListItem
    older: List[BriefListItem] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.title or UNTITLED_LABEL

    @property
    def ids(self) -> List[str]:
        return [self.latest.id] + [b.id for b in self.older]

    def contains(self, brief_id: Optional[str]) -> bool:
        return brief_id is not None and brief_id in self.ids


def _version_key(b: BriefListItem):
    # briefs without a version sort below every numbered one
    return (b.version is not None, b.version or 0, b.created_at or "")


def group_briefs_by_title(briefs: List[BriefListItem]) -> List[BriefGroup]:
    """
    One group per distinct title. Inside a group the highest version is `latest`,
    the rest are `older`, version descending. Groups are ordered by title.
    """
    buckets: Dict[str, List[BriefListItem]] = {}
    for b in briefs:
        buckets.setdefault((b.title or "").strip(), []).append(b)

    groups: List[BriefGroup] = []
    for title, items in buckets.items():
        ordered = sorted(items, key=_version_key, reverse=True)
        groups.append(BriefGroup(title=title, latest=ordered[0], older=ordered[1:]))

    groups.sort(key=lambda g: (g.title.casefold(), g.title))
    return groups


def find_group(groups: List[BriefGroup], brief_id: Optional[str]) -> Optional[BriefGroup]:
    for g in groups:
        if g.contains(brief_id):
            return g
    return None


def sync_expanded_group(
    groups: List[BriefGroup],
    selected_id: Optional[str],
    current: Optional[str],
) -> Optional[str]:
    """Expanded group after the selected brief changed from outside the list."""
    g = find_group(groups, selected_id)
    if g is not None and g.latest.id != selected_id:
        return g.title
    return current


def toggle_group(current: Optional[str], title: str) -> Optional[str]:
    return None if current == title else title
