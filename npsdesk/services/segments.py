"""Contact segmentation by group and tag labels."""
from collections import Counter
from typing import Iterable, List, Optional, Sequence

from npsdesk.schemas.contact import SegmentSummary


def filter_contacts(
    contacts: Iterable,
    *,
    groups: Optional[Sequence[str]] = None,
    tags: Optional[Sequence[str]] = None,
) -> List:
    """
    Select the contacts of a segment

    A contact matches when it belongs to at least one of ``groups`` and
    carries every one of ``tags``. An empty criterion matches everything.
    """
    wanted_groups = set(groups or ())
    wanted_tags = set(tags or ())
    selected = []
    for contact in contacts:
        if wanted_groups and not wanted_groups.intersection(contact.groups or ()):
            continue
        if not wanted_tags.issubset(contact.tags or ()):
            continue
        selected.append(contact)
    return selected


def summarize_segments(contacts: Sequence) -> SegmentSummary:
    group_counts: Counter = Counter()
    tag_counts: Counter = Counter()
    for contact in contacts:
        group_counts.update(set(contact.groups or ()))
        tag_counts.update(set(contact.tags or ()))
    return SegmentSummary(
        total=len(contacts),
        groups=dict(sorted(group_counts.items())),
        tags=dict(sorted(tag_counts.items())),
    )
