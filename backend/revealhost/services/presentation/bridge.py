"""Audience display bridge.

The audience display is an isolated surface: it shares nothing with the
host except a ``SnapshotAccessor`` it looks up by token in an
``AccessorRegistry``. It pulls the latest snapshot on a fixed interval and
repaints the fields that can change. This is a sampling protocol: states
between two polls are never seen by the display.

Lifetime rules:
- the host withdraws its accessor on teardown; the display is not closed,
  it just stops updating until it is closed or the accessor comes back
- the display notifies the host once when it is closed; a host that is
  already gone is ignored
"""
import logging
import threading
import uuid
from typing import Callable, Dict, Optional

from .errors import NoActiveContent
from .snapshot import PresentationSnapshot

logger = logging.getLogger(__name__)

Reader = Callable[[], Optional[PresentationSnapshot]]


def frame_fields(snapshot: PresentationSnapshot) -> Dict[str, object]:
    """Fields of a display frame that may change after the initial paint."""
    return {
        'blur_px': snapshot.blur_px,
        'zoom': snapshot.zoom,
        'timer_text': snapshot.timer_text,
        'hints': snapshot.visible_hints(),
        'answer': snapshot.visible_answer(),
    }


class SnapshotAccessor:
    """Read-only capability handed from the host to the audience display."""

    def __init__(self, read: Reader, on_close: Callable[[], None], log=None):
        self._read = read
        self._on_close = on_close
        self._withdrawn = False
        self._log = log or logger

    @property
    def alive(self) -> bool:
        return not self._withdrawn

    def withdraw(self) -> None:
        self._withdrawn = True

    def read(self) -> Optional[PresentationSnapshot]:
        if self._withdrawn:
            return None
        try:
            return self._read()
        except Exception as exc:
            # Callers poll; a broken read must never escape into the poller
            self._log.warning(f"[accessor-read-failed] {exc!r}")
            return None

    def on_close(self) -> None:
        if self._withdrawn:
            return
        self._on_close()


class AccessorRegistry:
    def __init__(self):
        self._lock = threading.Lock()
        self._accessors: Dict[str, SnapshotAccessor] = {}

    def publish(self, token: str, accessor: SnapshotAccessor) -> None:
        with self._lock:
            self._accessors[token] = accessor

    def lookup(self, token: str) -> Optional[SnapshotAccessor]:
        with self._lock:
            return self._accessors.get(token)

    def withdraw(self, token: str) -> None:
        with self._lock:
            accessor = self._accessors.pop(token, None)
        if accessor is not None:
            accessor.withdraw()


class AudienceDisplay:
    def __init__(self, token: str, registry: AccessorRegistry, paint: Callable[[Dict[str, object]], None],
                 poll_interval: float = 0.1, log=None):
        self.token = token
        self.poll_interval = poll_interval
        self.frame: Dict[str, object] = {}
        self.closed = False
        self.frozen = False
        self._registry = registry
        self._paint = paint
        self._log = log or logger

    def initial_paint(self, snapshot: PresentationSnapshot) -> None:
        self.frame = {
            'image_url': snapshot.image_url,
            'image_name': snapshot.image_name,
            **frame_fields(snapshot),
        }
        self._paint(dict(self.frame))

    def poll_once(self) -> bool:
        """Pull one snapshot and repaint what changed. Returns False when nothing was pulled."""
        if self.closed:
            return False
        accessor = self._registry.lookup(self.token)
        if accessor is None or not accessor.alive:
            self.frozen = True
            return False
        snapshot = accessor.read()
        # close() may have run while the read waited on the host lock
        if snapshot is None or self.closed:
            return False
        self.frozen = False
        changes = {k: v for k, v in frame_fields(snapshot).items() if self.frame.get(k) != v}
        if changes:
            self.frame.update(changes)
            self._paint(changes)
        return True

    def run(self, sleep: Callable[[float], None]) -> None:
        self._log.info(f"[display-poll-start] token={self.token} interval={self.poll_interval}s")
        while not self.closed:
            self.poll_once()
            sleep(self.poll_interval)
        self._log.info(f"[display-poll-stop] token={self.token}")

    def close(self, notify: bool = True) -> bool:
        if self.closed:
            return False
        self.closed = True
        if notify:
            accessor = self._registry.lookup(self.token)
            if accessor is not None:
                try:
                    accessor.on_close()
                except Exception as exc:
                    self._log.info(f"[display-close-notify-failed] token={self.token} {exc!r}")
        return True


class DisplayBridge:
    """Host side of the bridge: opens, tracks and tears down the one audience display."""

    def __init__(self, registry: AccessorRegistry, read: Reader,
                 paint: Callable[[str, Dict[str, object]], None],
                 on_closed: Callable[[str], None],
                 spawn=None, sleep=None, poll_interval: float = 0.1, log=None):
        self.registry = registry
        self._read = read
        self._paint = paint
        self._on_closed = on_closed
        self._spawn = spawn
        self._sleep = sleep
        self._poll_interval = poll_interval
        self._log = log or logger
        self.display: Optional[AudienceDisplay] = None

    def open(self) -> AudienceDisplay:
        snapshot = self._read()
        if snapshot is None or not snapshot.image_url:
            raise NoActiveContent()
        if self.display is not None:
            self._retire(self.display)

        token = uuid.uuid4().hex
        self._publish(token)
        display = AudienceDisplay(token, self.registry, lambda changes: self._paint(token, changes),
                                  poll_interval=self._poll_interval, log=self._log)
        display.initial_paint(snapshot)
        self.display = display
        self._log.info(f"[display-open] token={token} round={snapshot.round_id}")
        if self._spawn is not None:
            self._spawn(display.run, self._sleep)
        return display

    def get(self, token: str) -> Optional[AudienceDisplay]:
        if self.display is not None and self.display.token == token:
            return self.display
        return None

    def close(self, token: str) -> bool:
        display = self.get(token)
        if display is None:
            return False
        return display.close()

    def teardown(self) -> None:
        if self.display is None:
            return
        self.registry.withdraw(self.display.token)
        self._log.info(f"[display-accessor-withdrawn] token={self.display.token}")

    def restore(self) -> None:
        """Publish a fresh accessor for a display that outlived a host teardown."""
        display = self.display
        if display is None:
            return
        if display.closed:
            self.display = None
            return
        if self.registry.lookup(display.token) is None:
            self._publish(display.token)
            self._log.info(f"[display-accessor-restored] token={display.token}")

    def _publish(self, token: str) -> None:
        accessor = SnapshotAccessor(self._read, lambda: self._closed(token), log=self._log)
        self.registry.publish(token, accessor)

    def _closed(self, token: str) -> None:
        if self.display is None or self.display.token != token:
            return
        self.registry.withdraw(token)
        self.display = None
        self._log.info(f"[display-closed] token={token}")
        self._on_closed(token)

    def _retire(self, display: AudienceDisplay) -> None:
        display.close(notify=False)
        self.registry.withdraw(display.token)
        self._log.info(f"[display-retired] token={display.token}")
