"""Presentation engine: round clock, reveal flags, snapshots and the
audience display bridge."""

from .errors import PresentationError, NoActiveRound, NoActiveContent, UnknownRevealFlag
from .reveal import REVEAL_KEYS, RevealFlags
from .clock import AnimationClock, TimerState, PresentationParams, clamp_duration, progress_of
from .snapshot import PresentationSnapshot, RoundView, build_snapshot, format_timer
from .bridge import SnapshotAccessor, AccessorRegistry, AudienceDisplay, DisplayBridge
from .presenter import Presenter, HostRenderer, Notifier

__all__ = [
    'PresentationError', 'NoActiveRound', 'NoActiveContent', 'UnknownRevealFlag',
    'REVEAL_KEYS', 'RevealFlags',
    'AnimationClock', 'TimerState', 'PresentationParams', 'clamp_duration', 'progress_of',
    'PresentationSnapshot', 'RoundView', 'build_snapshot', 'format_timer',
    'SnapshotAccessor', 'AccessorRegistry', 'AudienceDisplay', 'DisplayBridge',
    'Presenter', 'HostRenderer', 'Notifier',
]
