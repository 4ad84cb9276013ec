"""Map parsed player names onto registered members or walk-in guests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

logger = logging.getLogger(__name__)

MEMBER = "member"
GUEST = "guest"


@dataclass(frozen=True)
class Participant:
    kind: str
    display_name: str
    member_id: str | None = None

    @property
    def is_guest(self) -> bool:
        return self.kind == GUEST

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for the upsert, alongside the event id."""
        if self.is_guest:
            return (GUEST, self.display_name)
        return (MEMBER, str(self.member_id))


def member(member_id: str | int, display_name: str) -> Participant:
    return Participant(MEMBER, display_name.strip(), str(member_id))


def guest(display_name: str) -> Participant:
    return Participant(GUEST, display_name.strip())


class RosterIndex:
    """Exact, case-sensitive lookup of trimmed display names.

    When two registered members share a display name the first one wins and
    the name is reported in ``ambiguous_names`` so the operator can resolve
    it with an override.
    """

    def __init__(self, roster: Iterable[Mapping], overrides: Mapping[str, str | None] | None = None):
        self._by_name: dict[str, Participant] = {}
        self._names_by_id: dict[str, str] = {}
        self.ambiguous_names: list[str] = []
        for entry in roster:
            name = (entry.get("display_name") or "").strip()
            if not name:
                continue
            self._names_by_id[str(entry["id"])] = name
            if name in self._by_name:
                if name not in self.ambiguous_names:
                    self.ambiguous_names.append(name)
                continue
            self._by_name[name] = member(entry["id"], name)
        self._overrides = {
            (name or "").strip(): (str(value) if value not in (None, "") else None)
            for name, value in (overrides or {}).items()
        }

    def resolve(self, name: str) -> Participant:
        trimmed = (name or "").strip()
        if trimmed in self._overrides:
            member_id = self._overrides[trimmed]
            if member_id is None:
                return guest(trimmed)
            if member_id in self._names_by_id:
                return member(member_id, self._names_by_id[member_id])
            logger.warning("Override for %s points at unknown member %s", trimmed, member_id)
        found = self._by_name.get(trimmed)
        if found:
            return found
        return guest(trimmed)

    def preview(self, names: Iterable[str]) -> dict:
        matched: list[str] = []
        guests: list[str] = []
        for name in names:
            participant = self.resolve(name)
            bucket = guests if participant.is_guest else matched
            if participant.display_name not in bucket:
                bucket.append(participant.display_name)
        return {
            "members": matched,
            "guests": guests,
            "ambiguous": [name for name in self.ambiguous_names if name in matched],
        }
