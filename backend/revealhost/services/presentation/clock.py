"""Round clock.

``AnimationClock`` keeps elapsed time as a continuous function of a
monotonic time source while running. Elapsed is anchored at
``now - elapsed`` on every start or resume, so pausing and resuming never
drifts. Every transition bumps ``generation``; a scheduled tick chain
captures the generation it was started for and stops as soon as it no
longer matches.
"""
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional


def progress_of(elapsed: float, duration: float) -> float:
    if duration <= 0:
        return 0.0
    return min(1.0, max(0.0, elapsed / duration))


def clamp_duration(value, lo: int, hi: int, default: int) -> int:
    try:
        seconds = int(float(value))
    except (TypeError, ValueError, OverflowError):
        seconds = default
    return max(lo, min(hi, seconds))


@dataclass(frozen=True)
class TimerState:
    duration: float
    elapsed: float
    running: bool

    @property
    def progress(self) -> float:
        return progress_of(self.elapsed, self.duration)


@dataclass(frozen=True)
class PresentationParams:
    start_blur_px: int = 18
    auto_unblur: bool = True
    start_zoom: float = 2.0

    @classmethod
    def from_settings(cls, data: Mapping[str, object], config: Optional[Mapping[str, object]] = None) -> 'PresentationParams':
        """Build parameters from raw settings, clamping out-of-range values."""
        config = config or {}
        max_blur = int(config.get('START_BLUR_MAX_PX', 30))
        max_zoom = float(config.get('START_ZOOM_MAX', 3.0))
        default_blur = int(config.get('START_BLUR_PX', 18))
        default_zoom = float(config.get('START_ZOOM', 2.0))

        try:
            blur = int(round(float(data.get('start_blur_px', default_blur))))
        except (TypeError, ValueError, OverflowError):
            blur = default_blur
        try:
            zoom = float(data.get('start_zoom', default_zoom))
        except (TypeError, ValueError):
            zoom = default_zoom
        if zoom != zoom:  # NaN
            zoom = default_zoom

        return cls(
            start_blur_px=max(0, min(max_blur, blur)),
            auto_unblur=bool(data.get('auto_unblur', config.get('AUTO_UNBLUR', True))),
            start_zoom=max(1.0, min(max_zoom, zoom)),
        )


class AnimationClock:
    def __init__(self, duration: float, now: Callable[[], float] = time.monotonic):
        self.now = now
        self.duration = max(0.0, float(duration))
        self.elapsed = 0.0
        self.running = False
        self.generation = 0
        self._anchor = 0.0

    @property
    def state(self) -> TimerState:
        return TimerState(self.duration, self.elapsed, self.running)

    def start(self) -> int:
        """Start from zero. Returns the generation of the new tick chain."""
        self.elapsed = 0.0
        self._anchor = self.now()
        self.running = True
        self.generation += 1
        return self.generation

    def resume(self) -> bool:
        if self.running or self.elapsed >= self.duration:
            return False
        self._anchor = self.now() - self.elapsed
        self.running = True
        self.generation += 1
        return True

    def pause(self) -> None:
        if not self.running:
            return
        self._advance()
        self.running = False
        self.generation += 1

    def stop(self) -> None:
        """Cancel any tick chain and rewind to zero (round switch)."""
        self.running = False
        self.elapsed = 0.0
        self.generation += 1

    def reset(self) -> None:
        self.elapsed = 0.0
        if self.running:
            self._anchor = self.now()

    def set_duration(self, duration: float) -> bool:
        """Change the duration; returns True if this finished a running clock."""
        if self.running:
            self._advance()
        self.duration = max(0.0, float(duration))
        if self.elapsed > self.duration:
            self.elapsed = self.duration
        if self.running:
            self._anchor = self.now() - self.elapsed
            if self.elapsed >= self.duration:
                self._finish()
                return True
        return False

    def tick(self) -> bool:
        """Sample the time source once. Returns True on the tick that finishes the round."""
        if not self.running:
            return False
        self._advance()
        if self.elapsed >= self.duration:
            self._finish()
            return True
        return False

    def _advance(self) -> None:
        self.elapsed = min(self.duration, max(0.0, self.now() - self._anchor))

    def _finish(self) -> None:
        self.elapsed = self.duration
        self.running = False
        self.generation += 1
