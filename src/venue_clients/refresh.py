"""
Debounced refresh of the reconciled view.

The store's change feed fires once per inserted row, so a burst of movements
produces a burst of notifications. RefreshController coalesces them: each
notification replaces the pending deferred refresh, and only the last one in a
quiet window triggers a fetch-and-reconcile cycle.

Cycles never overlap and are never cancelled once started. A cycle triggered
while another runs waits for it and then runs. Each cycle publishes a brand
new result; readers always see either the previous result or the new one.
"""

import logging
import threading
from typing import Any, Callable

from inventory_core import settings
from inventory_core.records import ReconciliationOutput

from .venue_client import LoadedSnapshot


logger = logging.getLogger(__name__)


def _reconcile_snapshot(snapshot: LoadedSnapshot) -> ReconciliationOutput:
    return snapshot.reconcile()


class RefreshController:
    """
    Owns the deferred refresh task and the current result.

    Usage:
        loader = VenueSnapshotLoader("data/sample")
        controller = RefreshController(loader.load_all)
        controller.refresh_now()             # manual "refresh now"
        feed.subscribe(controller.notify)    # debounced automatic refresh
        controller.result.items
    """

    def __init__(
        self,
        fetch: Callable[[], Any],
        compute: Callable[[Any], ReconciliationOutput] = _reconcile_snapshot,
        debounce_seconds: float = settings.REFRESH_DEBOUNCE_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
        on_result: Callable[[ReconciliationOutput], None] | None = None,
    ):
        """
        Args:
            fetch: Retrieves a fresh snapshot; may raise on fetch failure
            compute: Turns a snapshot into a result (defaults to snapshot.reconcile())
            timer_factory: threading.Timer-compatible factory for the deferred task
            on_result: Called with every newly published result
        """
        self._fetch = fetch
        self._compute = compute
        self.debounce_seconds = debounce_seconds
        self._timer_factory = timer_factory
        self._on_result = on_result

        self._pending: tuple[object, Any] | None = None
        self._pending_lock = threading.Lock()
        self._run_lock = threading.Lock()

        self._result: ReconciliationOutput | None = None
        self.completed_cycles = 0
        self.failed_cycles = 0

    @property
    def result(self) -> ReconciliationOutput | None:
        """Latest published result; stays in place when a fetch fails."""
        return self._result

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def notify(self, *_event: Any) -> None:
        """
        Signal that movements, sales or stock levels changed.

        Cancels the pending refresh, if any, and schedules a new one after the
        debounce window. Accepts and ignores change-feed payloads.
        """
        token = object()
        timer = self._timer_factory(
            self.debounce_seconds, self._run_scheduled, args=(token,)
        )
        timer.daemon = True

        with self._pending_lock:
            if self._pending is not None:
                self._pending[1].cancel()
            self._pending = (token, timer)

        timer.start()

    def _run_scheduled(self, token: object) -> None:
        with self._pending_lock:
            if self._pending is None or self._pending[0] is not token:
                # Superseded by a newer notification
                return
            self._pending = None
        self.refresh_now()

    def refresh_now(self) -> bool:
        """
        Fetch and recompute immediately.

        Returns False when the fetch or the recompute failed; the previous
        result stays visible.
        """
        with self._run_lock:
            try:
                snapshot = self._fetch()
            except Exception:
                self.failed_cycles += 1
                logger.exception("Snapshot fetch failed, keeping previous result")
                return False

            try:
                result = self._compute(snapshot)
            except Exception:
                self.failed_cycles += 1
                logger.exception("Reconciliation failed, keeping previous result")
                return False

            self._result = result
            self.completed_cycles += 1

            logger.debug(
                "Refresh complete: %s items, %s days", len(result.items), len(result.daily)
            )
            # Delivered under the lock so callbacks see results in cycle order
            if self._on_result is not None:
                self._on_result(result)
        return True

    def close(self) -> None:
        """Cancel any pending refresh. A cycle already running finishes."""
        with self._pending_lock:
            if self._pending is not None:
                self._pending[1].cancel()
                self._pending = None

    def __enter__(self) -> "RefreshController":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
