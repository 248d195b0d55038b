"""Presentation snapshots: the single value both displays render from."""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .clock import PresentationParams, TimerState
from .reveal import RevealFlags


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_timer(remaining_seconds: int) -> str:
    remaining = max(0, int(remaining_seconds))
    return f"{remaining // 60}:{remaining % 60:02d}"


@dataclass(frozen=True)
class RoundView:
    """Read-only copy of the active round, detached from the database session."""
    id: str
    image_url: str = ''
    image_name: str = ''
    answer: str = ''
    hints: Tuple[str, str, str] = ('', '', '')
    reveal: RevealFlags = field(default_factory=RevealFlags)


@dataclass(frozen=True)
class PresentationSnapshot:
    round_id: str
    image_url: str
    image_name: str
    blur_px: int
    zoom: float
    remaining_seconds: int
    progress: float
    running: bool
    reveal: RevealFlags
    hints: Tuple[str, str, str]
    answer: str

    @property
    def timer_text(self) -> str:
        return format_timer(self.remaining_seconds)

    def visible_hints(self):
        """Hint labels as shown on screen: revealed and non-empty only."""
        return [
            f"Hint {i}: {text}"
            for i, (shown, text) in enumerate(zip(self.reveal.hint_flags(), self.hints), start=1)
            if shown and text
        ]

    def visible_answer(self) -> Optional[str]:
        return self.answer if self.reveal.answer and self.answer else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'round_id': self.round_id,
            'image_url': self.image_url,
            'image_name': self.image_name,
            'blur_px': self.blur_px,
            'zoom': self.zoom,
            'remaining_seconds': self.remaining_seconds,
            'timer_text': self.timer_text,
            'progress': self.progress,
            'running': self.running,
            'reveal': self.reveal.to_dict(),
            'hints': list(self.hints),
            'answer': self.answer,
        }


def live_blur(timer: TimerState, params: PresentationParams, preview: bool) -> int:
    if preview:
        return 0
    if params.auto_unblur:
        return round_half_up((1 - timer.progress) * params.start_blur_px)
    return params.start_blur_px


def live_zoom(timer: TimerState, params: PresentationParams, preview: bool) -> float:
    if preview:
        return 1.0
    if timer.running and params.auto_unblur:
        return 1.0 + (params.start_zoom - 1.0) * (1 - timer.progress)
    if timer.elapsed > 0:
        return 1.0
    return params.start_zoom


def build_snapshot(timer: TimerState, params: PresentationParams,
                   round_view: Optional[RoundView], preview: bool = False) -> Optional[PresentationSnapshot]:
    """Combine timer, parameters and round into a snapshot.

    Returns None when no round is active. Every derived field comes from
    the single ``timer`` value passed in.
    """
    if round_view is None:
        return None
    return PresentationSnapshot(
        round_id=round_view.id,
        image_url=round_view.image_url,
        image_name=round_view.image_name,
        blur_px=live_blur(timer, params, preview),
        zoom=live_zoom(timer, params, preview),
        remaining_seconds=max(0, round_half_up(timer.duration - timer.elapsed)),
        progress=timer.progress,
        running=timer.running,
        reveal=round_view.reveal,
        hints=tuple(round_view.hints),
        answer=round_view.answer,
    )
