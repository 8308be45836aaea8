"""Grouping, filtering and ordering of the message list by class."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from .model import MessageMeta


@dataclass
class GroupedMessages:
    """Messages that passed the filter, grouped by class in first-seen order.

    ``meta_by_id`` holds every message, filtered out or not, so that a class
    root can still be found when only its members match.
    """

    groups: dict[int, list[MessageMeta]] = field(default_factory=dict)
    group_order: list[int] = field(default_factory=list)
    meta_by_id: dict[int, MessageMeta] = field(default_factory=dict)


def normalize_filter(raw: str) -> str:
    """Filter text as it is matched: trimmed and lower-cased."""
    return raw.strip().lower()


def matches_filter(meta: MessageMeta, filter_text: str) -> bool:
    """Whether a message's name or class name contains the normalized filter."""
    if not filter_text:
        return True
    return filter_text in meta.name.lower() or filter_text in meta.class_name.lower()


def build_groups(messages: Iterable[MessageMeta], filter_text: str) -> GroupedMessages:
    """Group the messages that match ``filter_text`` by their class id."""
    grouped = GroupedMessages()
    for meta in messages:
        grouped.meta_by_id[meta.id] = meta
        if not matches_filter(meta, filter_text):
            continue
        members = grouped.groups.get(meta.class_id)
        if members is None:
            members = grouped.groups[meta.class_id] = []
            grouped.group_order.append(meta.class_id)
        members.append(meta)
    return grouped


def sort_members(members: Iterable[MessageMeta], class_id: int) -> list[MessageMeta]:
    """Class root first, then most recently modified, then highest id."""
    return sorted(members, key=lambda m: (m.id != class_id, -m.modified_ms, -m.id))


def class_title(
    class_id: int, members: Sequence[MessageMeta], meta_by_id: Mapping[int, MessageMeta]
) -> str:
    """Display name of a class: the root's class name, else a member's, else a default."""
    root = meta_by_id.get(class_id)
    if root is not None:
        return root.class_name
    if members:
        return members[0].class_name
    return f"Class {class_id}"


def class_label(
    class_id: int, members: Sequence[MessageMeta], meta_by_id: Mapping[int, MessageMeta]
) -> str:
    """Class title followed by the number of members shown."""
    return f"{class_title(class_id, members, meta_by_id)} ({len(members)})"


def default_select_id(
    class_id: int, members: Sequence[MessageMeta], meta_by_id: Mapping[int, MessageMeta]
) -> int | None:
    """The message opened when a class row is clicked.

    The class root if it exists, otherwise the most recently modified member
    (the last one among equals).
    """
    root = meta_by_id.get(class_id)
    if root is not None:
        return root.id
    best: MessageMeta | None = None
    for meta in members:
        if best is None or meta.modified_ms >= best.modified_ms:
            best = meta
    return None if best is None else best.id