import logging
import threading
import time
from dataclasses import replace
from typing import Optional

from flask import current_app

from .bridge import AccessorRegistry, AudienceDisplay, DisplayBridge
from .clock import AnimationClock, PresentationParams, TimerState, clamp_duration
from .errors import NoActiveContent, NoActiveRound
from .reveal import RevealFlags
from .snapshot import PresentationSnapshot, build_snapshot

HOST_ROOM = 'host'


def display_room(token: str) -> str:
    return f"display:{token}"


class HostRenderer:
    """Primary renderer: pushes snapshots to the host room and frames to display rooms."""

    def __init__(self, socketio, namespace='/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def __call__(self, snapshot: Optional[PresentationSnapshot]) -> None:
        payload = snapshot.to_dict() if snapshot else {'active': False}
        self.socketio.emit('presentation', payload, to=HOST_ROOM, namespace=self.namespace)

    def paint_display(self, token: str, changes) -> None:
        self.socketio.emit('display_paint', {'token': token, 'frame': changes}, to=display_room(token), namespace=self.namespace)


class Notifier:
    """Transient, non-blocking notices for the host."""

    def __init__(self, socketio, logger, duration_ms=2000, namespace='/ws'):
        self.socketio = socketio
        self.logger = logger
        self.duration_ms = duration_ms
        self.namespace = namespace

    def __call__(self, message: str) -> None:
        self.logger.info(f"[notice] {message}")
        self.socketio.emit('notice', {'message': message, 'duration_ms': self.duration_ms}, to=HOST_ROOM, namespace=self.namespace)


class Presenter:
    """Owns the round clock, the active round view and the audience display bridge.

    - Reads and writes rounds only through ``store`` (request context)
    - Background tick and poll chains never touch the store
    - One re-entrant lock serialises every state change; a tick samples
      elapsed once and derives the whole snapshot from that sample
    - In TESTING mode no background chains are spawned unless
      ENABLE_SCHEDULER_IN_TESTS is set; tests call ``tick()`` themselves
    """

    def __init__(self, store, config, render=None, paint_display=None, notify=None,
                 spawn=None, sleep=None, now=time.monotonic, logger=None):
        self.store = store
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._render = render or (lambda snapshot: None)
        self._notify = notify or (lambda message: None)
        self._sleep = sleep or time.sleep
        if config.get('TESTING') and not config.get('ENABLE_SCHEDULER_IN_TESTS'):
            spawn = None
        self._spawn = spawn

        self.clock = AnimationClock(self._clamped_duration(config.get('ROUND_DURATION_SEC', 60)), now=now)
        self.params = PresentationParams.from_settings({}, config)
        self.preview = False
        self.round_view = None
        self.loaded = False
        self.torn_down = False
        self.bridge = DisplayBridge(
            AccessorRegistry(),
            read=self.snapshot,
            paint=paint_display or (lambda token, changes: None),
            on_closed=self._display_closed,
            spawn=spawn,
            sleep=self._sleep,
            poll_interval=int(config.get('DISPLAY_POLL_MS', 100)) / 1000.0,
            log=self.logger,
        )

    # ---- loading from the store ----

    def ensure_loaded(self) -> None:
        if not self.loaded:
            self.load()

    def load(self) -> None:
        with self._lock:
            self._apply_settings(self.store.settings())
            self.round_view = self.store.active_round_view()
            self.loaded = True

    def settings_changed(self) -> None:
        with self._lock:
            self._apply_settings(self.store.settings())
            self._publish()

    def refresh_round(self, stop_clock: bool = False) -> None:
        """Re-read the active round; a different round (or ``stop_clock``) rewinds the clock."""
        with self._lock:
            previous = self.round_view.id if self.round_view else None
            self.round_view = self.store.active_round_view()
            current = self.round_view.id if self.round_view else None
            if stop_clock or previous != current:
                self.clock.stop()
                self.logger.info(f"[round-switch] from={previous} to={current}")
            self._publish()

    # ---- snapshot access ----

    @property
    def timer_state(self) -> TimerState:
        with self._lock:
            return self.clock.state

    def snapshot(self) -> Optional[PresentationSnapshot]:
        with self._lock:
            return build_snapshot(self.clock.state, self.params, self.round_view, self.preview)

    # ---- clock ----

    def start(self) -> PresentationSnapshot:
        with self._lock:
            view = self._require_round()
            cleared = RevealFlags()
            self.store.write_reveal(view.id, cleared)
            self.round_view = replace(view, reveal=cleared)
            generation = self.clock.start()
            self.logger.info(f"[clock-start] round={view.id} duration={self.clock.duration}s generation={generation}")
            self._schedule_ticks(generation)
            return self._publish()

    def pause(self) -> Optional[PresentationSnapshot]:
        with self._lock:
            was_running = self.clock.running
            self.clock.pause()
            if was_running:
                self.logger.info(f"[clock-pause] elapsed={self.clock.elapsed:.3f}s")
            return self._publish()

    def resume(self) -> Optional[PresentationSnapshot]:
        with self._lock:
            self._require_round()
            if self.clock.resume():
                self.logger.info(f"[clock-resume] elapsed={self.clock.elapsed:.3f}s generation={self.clock.generation}")
                self._schedule_ticks(self.clock.generation)
            return self._publish()

    def reset_clock(self) -> Optional[PresentationSnapshot]:
        with self._lock:
            self.clock.reset()
            return self._publish()

    def tick(self, generation: Optional[int] = None) -> bool:
        """Advance the clock one frame. Returns False when the tick chain must stop."""
        with self._lock:
            if generation is not None and generation != self.clock.generation:
                self.logger.info(f"[clock-abort] stale generation={generation} current={self.clock.generation}")
                return False
            if not self.clock.running:
                return False
            finished = self.clock.tick()
            self._publish()
            if finished:
                self.logger.info(f"[clock-finish] round={self.round_view.id if self.round_view else None}")
                return False
            return True

    def _schedule_ticks(self, generation: int) -> None:
        if self._spawn is None:
            return
        self._spawn(self._tick_loop, generation)

    def _tick_loop(self, generation: int) -> None:
        frame = float(self.config.get('CLOCK_FRAME_SEC', 0.016))
        try:
            hb = int(self.config.get('TIMER_HEARTBEAT_SEC', 0))
        except (TypeError, ValueError):
            hb = 0
        last_beat = time.monotonic()
        while self.tick(generation):
            if hb > 0 and time.monotonic() - last_beat >= hb:
                last_beat = time.monotonic()
                state = self.timer_state
                self.logger.info(f"[clock-heartbeat] generation={generation} remaining={max(0.0, state.duration - state.elapsed):.1f}s")
            self._sleep(frame)

    # ---- preview and reveals ----

    def set_preview(self, enabled: Optional[bool] = None) -> Optional[PresentationSnapshot]:
        with self._lock:
            self._require_round()
            self.preview = (not self.preview) if enabled is None else bool(enabled)
            return self._publish()

    def toggle_reveal(self, key: str) -> PresentationSnapshot:
        with self._lock:
            view = self._require_round()
            flags = view.reveal.toggled(key)
            self.store.write_reveal(view.id, flags)
            self.round_view = replace(view, reveal=flags)
            return self._publish()

    def reset_reveals(self) -> PresentationSnapshot:
        with self._lock:
            view = self._require_round()
            flags = view.reveal.cleared()
            self.store.write_reveal(view.id, flags)
            self.round_view = replace(view, reveal=flags)
            return self._publish()

    # ---- audience display ----

    def open_display(self) -> AudienceDisplay:
        with self._lock:
            try:
                display = self.bridge.open()
            except NoActiveContent as exc:
                self._notify(exc.notice)
                raise
            self._notify('Participant view opened')
            return display

    def display(self, token: str) -> Optional[AudienceDisplay]:
        with self._lock:
            return self.bridge.get(token)

    def close_display(self, token: str) -> bool:
        with self._lock:
            return self.bridge.close(token)

    def notify(self, message: str) -> None:
        self._notify(message)

    def _display_closed(self, token: str) -> None:
        self._notify('Participant view closed')

    # ---- host lifecycle ----

    def teardown(self) -> None:
        """Host went away: stop the tick chain and withdraw the display accessor."""
        with self._lock:
            self.clock.pause()
            self.bridge.teardown()
            self.torn_down = True
            self.logger.info('[host-teardown] accessor withdrawn')

    def attach_host(self) -> None:
        with self._lock:
            self.ensure_loaded()
            if self.torn_down:
                self.bridge.restore()
                self.torn_down = False
                self.logger.info('[host-attach] accessor restored')

    # ---- helpers ----

    def _require_round(self):
        if self.round_view is None:
            exc = NoActiveRound()
            self._notify(exc.notice)
            raise exc
        return self.round_view

    def _clamped_duration(self, value) -> int:
        return clamp_duration(
            value,
            int(self.config.get('ROUND_DURATION_MIN_SEC', 10)),
            int(self.config.get('ROUND_DURATION_MAX_SEC', 300)),
            int(self.config.get('ROUND_DURATION_SEC', 60)),
        )

    def _apply_settings(self, settings) -> None:
        self.params = PresentationParams.from_settings(settings, self.config)
        if self.clock.set_duration(self._clamped_duration(settings.get('duration_sec'))):
            self.logger.info('[clock-finish] duration shortened past elapsed')

    def _publish(self) -> Optional[PresentationSnapshot]:
        snapshot = build_snapshot(self.clock.state, self.params, self.round_view, self.preview)
        self._render(snapshot)
        return snapshot


def current_presenter() -> Presenter:
    presenter = current_app.extensions['presenter']
    presenter.ensure_loaded()
    return presenter
