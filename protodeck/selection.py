"""Selection state of the message list: import mode, delete marks and renaming."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from .catalog import matches_filter, normalize_filter
from .model import MessageMeta


class ImportMode(enum.Enum):
    """How pasted input is imported: as plain bytes or as an envelope of frames."""

    BYTES = "bytes"
    ENVELOPE = "envelope"

    @staticmethod
    def from_value(value: str) -> ImportMode | None:
        """The mode named by ``value``, or None if it names none."""
        try:
            return ImportMode(value)
        except ValueError:
            return None


class SelectState(enum.Enum):
    """How many members of a class are marked."""

    NONE = "none"
    SOME = "some"
    ALL = "all"


def class_select_state(members: Iterable[MessageMeta], selected: Iterable[int]) -> SelectState:
    """Whether none, some or all of ``members`` are in ``selected``."""
    chosen = set(selected)
    members = list(members)
    count = sum(1 for meta in members if meta.id in chosen)
    if count == 0:
        return SelectState.NONE
    if count == len(members):
        return SelectState.ALL
    return SelectState.SOME


@dataclass
class DeleteSelection:
    """The set of message ids marked for deletion."""

    ids: set[int] = field(default_factory=set)

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self.ids

    def __iter__(self) -> Iterator[int]:
        return iter(self.ids)

    def toggle(self, message_id: int, checked: bool) -> None:
        """Mark or unmark one message."""
        if checked:
            self.ids.add(message_id)
        else:
            self.ids.discard(message_id)

    def set_class(self, members: Iterable[MessageMeta], checked: bool) -> None:
        """Mark or unmark every member of a class."""
        member_ids = {meta.id for meta in members}
        if checked:
            self.ids |= member_ids
        else:
            self.ids -= member_ids

    def select_all_visible(self, messages: Iterable[MessageMeta], filter_text: str) -> None:
        """Mark every message that the (raw) filter text lets through."""
        normalized = normalize_filter(filter_text)
        self.ids.update(meta.id for meta in messages if matches_filter(meta, normalized))

    def retain(self, messages: Iterable[MessageMeta]) -> None:
        """Drop marks of messages that no longer exist."""
        existing = {meta.id for meta in messages}
        self.ids &= existing

    def clear(self) -> None:
        self.ids.clear()


@dataclass
class RenameSession:
    """An in-place rename of a message or class, committed through ``on_rename``."""

    on_rename: Callable[[int, str], None]
    renaming_id: int | None = None
    text: str = ""

    def start(self, target_id: int, current_name: str) -> None:
        """Begin renaming ``target_id``, starting from its current name."""
        self.renaming_id = target_id
        self.text = current_name

    def commit(self) -> tuple[int, str] | None:
        """Pass the trimmed name on, unless there is no target or the name is empty."""
        if self.renaming_id is None:
            return None
        name = self.text.strip()
        if not name:
            return None
        self.on_rename(self.renaming_id, name)
        return self.renaming_id, name

    def on_key(self, key: str) -> bool:
        """Handle a key press; True if the key was consumed.

        Escape cancels the rename, Enter commits it and ends it.
        """
        if key == "Escape":
            self.renaming_id = None
            return True
        if key != "Enter":
            return False
        self.commit()
        self.renaming_id = None
        return True

    def on_blur(self, target_id: int) -> None:
        """Losing focus commits the rename, if it is still the one in progress."""
        if self.renaming_id != target_id:
            return
        self.commit()
        self.renaming_id = None