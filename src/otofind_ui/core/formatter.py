"""
Result Formatter
================

Owns the DisplayState of a classification window. Every mutation goes
through ``_set_state``, which may only run on the thread the formatter
lives on (the GUI thread).

Classes
-------
ResultFormatter
    Collects per-model outcomes for the current request and renders text

Notes
-----
Outcomes for any request other than the most recent ``begin()`` are
ignored. A request that has not heard from every model within
``timeout_ms`` is moved to the Failed state.

Examples
--------
>>> formatter = ResultFormatter(expected=2)
>>> formatter.state_changed.connect(lambda s: label.setText(render(s)))
>>> handles = runner.run(image)
>>> formatter.begin(runner.last_request_id)
>>> formatter.attach(handles)
"""

import logging

from PySide6.QtCore import QObject, QThread, QTimer, Signal, Slot

from otofind_ui.core import config
from otofind_ui.core.display import (
    Classifying,
    Failed,
    Idle,
    MergePolicy,
    Showing,
    apply_failure,
    apply_result,
    apply_timeout,
    render,
)

logger = logging.getLogger(__name__)


class ResultFormatter(QObject):
    """
    Single-writer owner of the classification display state.

    Parameters
    ----------
    expected : int
        Number of configured models, i.e. results per complete request
    policy : MergePolicy, default=MergePolicy.REPLACE
        How a model failure combines with other models' results
    precision : int, default=config.SCORE_PRECISION
        Decimal places of the rendered percentage
    timeout_ms : int or None, default=config.RESULT_TIMEOUT_MS
        Bound on a request's lifetime; None or 0 disables the timeout
    parent : QObject, optional

    Signals
    -------
    state_changed : Signal(object)
        Emitted with the new state after every change
    """

    state_changed = Signal(object)

    def __init__(
        self,
        expected: int,
        policy: MergePolicy = MergePolicy.REPLACE,
        precision: int = config.SCORE_PRECISION,
        timeout_ms: int | None = config.RESULT_TIMEOUT_MS,
        parent=None,
    ):
        super().__init__(parent)
        if expected < 1:
            raise ValueError("expected must be at least 1")
        self.expected = expected
        self.policy = policy
        self.precision = precision
        self.timeout_ms = timeout_ms
        self._state = Idle()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)
        self._timed_request = None

    # ------------------------------------------------------------------
    # read-only snapshot
    # ------------------------------------------------------------------
    @property
    def state(self):
        return self._state

    @property
    def text(self) -> str:
        return render(self._state, self.precision)

    def is_complete(self) -> bool:
        """True once the current request can no longer change."""
        if isinstance(self._state, Failed):
            return True
        return isinstance(self._state, Showing) and len(self._state.entries) >= self.expected

    # ------------------------------------------------------------------
    # mutation entry points (GUI thread only)
    # ------------------------------------------------------------------
    def begin(self, request_id: int) -> None:
        """Switch to Classifying for a new request, dropping older results."""
        self._set_state(Classifying(request_id))
        if self.timeout_ms:
            self._timed_request = request_id
            self._timer.start(self.timeout_ms)

    def fail(self, request_id: int, message: str = config.ERROR_TEXT) -> None:
        """
        Show ``message`` for a request that never reached the models.

        ``request_id`` must be newer than any dispatched request, so that
        late outcomes of earlier requests are dropped as stale.
        """
        self._set_state(Failed(request_id, message))
        self._timer.stop()
        self._timed_request = None

    def reset(self) -> None:
        self._set_state(Idle())
        self._timer.stop()

    def attach(self, handles) -> None:
        """Route the outcomes of a request's handles into this formatter."""
        for handle in handles:
            handle.finished.connect(self.add_result)
            handle.failed.connect(self.add_failure)

    @Slot(object)
    def add_result(self, result) -> None:
        self._set_state(apply_result(self._state, result))

    @Slot(object)
    def add_failure(self, failure) -> None:
        logger.warning(
            "No result from '%s' for request %d: %s",
            failure.tag,
            failure.request_id,
            failure.message,
        )
        self._set_state(apply_failure(self._state, failure, self.policy))

    @Slot()
    def _on_timeout(self) -> None:
        if self._timed_request is None:
            return
        new = apply_timeout(self._state, self._timed_request, self.expected)
        if new is not self._state:
            logger.error(
                "Request %d timed out after %d ms", self._timed_request, self.timeout_ms
            )
        self._set_state(new)

    def _set_state(self, new) -> None:
        if QThread.currentThread() is not self.thread():
            raise RuntimeError("ResultFormatter may only be mutated from its own thread")
        if new == self._state:
            return
        self._state = new
        if self.is_complete():
            self._timer.stop()
        self.state_changed.emit(new)
