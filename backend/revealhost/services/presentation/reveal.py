"""Per-round reveal flags.

The four flags form a flat toggle set, not a progression: any flag may be
turned on independently of the others, so the answer can be shown before
any hint. Flags only go back to all-false when a round is (re)started or
when the host explicitly resets them.
"""
from dataclasses import dataclass, replace, fields
from typing import Dict, Mapping, Optional

from .errors import UnknownRevealFlag

REVEAL_KEYS = ('hint1', 'hint2', 'hint3', 'answer')


@dataclass(frozen=True)
class RevealFlags:
    hint1: bool = False
    hint2: bool = False
    hint3: bool = False
    answer: bool = False

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, object]]) -> 'RevealFlags':
        data = data or {}
        return cls(**{k: bool(data.get(k, False)) for k in REVEAL_KEYS})

    def toggled(self, key: str) -> 'RevealFlags':
        if key not in REVEAL_KEYS:
            raise UnknownRevealFlag(f'Unknown reveal flag: {key}')
        return replace(self, **{key: not getattr(self, key)})

    def cleared(self) -> 'RevealFlags':
        return RevealFlags()

    def hint_flags(self):
        return (self.hint1, self.hint2, self.hint3)

    def to_dict(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
