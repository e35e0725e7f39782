"""
Inference Runner
================

Dispatches one image to every classifier of a ModelSet on the background
thread pool and reports each model's outcome through its own handle.

Classes
-------
InferenceRequest
    Image, orientation flag and request id for one user action
ClassificationHandle
    Per-model QObject emitting ``finished`` or ``failed`` exactly once
InferenceRunner
    Builds requests, normalizes orientation, submits the background task

Notes
-----
Handles are created on the calling (GUI) thread and emitted from the
worker, so slots of GUI-thread QObjects connected to them run on the GUI
thread. The models of one request run back-to-back in a single task; an
exception in one model is logged and reported as a failure for that model
only.

Examples
--------
>>> runner = InferenceRunner(load_model_set())
>>> for handle in runner.run("eardrum.jpg"):
...     handle.finished.connect(formatter.add_result)
...     handle.failed.connect(formatter.add_failure)

See Also
--------
otofind_ui.core.formatter : Collects the results on the GUI thread
"""

import functools
import itertools
import logging
from dataclasses import dataclass

from PIL import Image
from PySide6.QtCore import QObject, QTimer, Signal, Slot

from otofind_ui.core.display import InferenceFailure, InferenceResult
from otofind_ui.core.image_io import load_image, normalize_orientation, read_orientation
from otofind_ui.core.tasks import submit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InferenceRequest:
    request_id: int
    image: Image.Image
    orientation: int = 1


class ClassificationHandle(QObject):
    """
    Outcome of one model for one request.

    Signals
    -------
    finished : Signal(object)
        Carries an InferenceResult
    failed : Signal(object)
        Carries an InferenceFailure
    """

    finished = Signal(object)
    failed = Signal(object)

    def __init__(self, request_id: int, tag: str, parent=None):
        super().__init__(parent)
        self.request_id = request_id
        self.tag = tag

    def __repr__(self):
        return f"ClassificationHandle(request_id={self.request_id}, tag={self.tag!r})"


class InferenceRunner(QObject):
    """
    Run every classifier of a ModelSet on an image in the background.

    Parameters
    ----------
    models : ModelSet
        Loaded classifiers, owned for the runner's lifetime
    parent : QObject, optional

    Signals
    -------
    request_done : Signal(int)
        Emitted from the worker after every handle of a request has fired
    """

    request_done = Signal(int)

    def __init__(self, models, parent=None):
        super().__init__(parent)
        self.models = models
        self._ids = itertools.count(1)
        self._last_request_id = 0
        self._active: dict[int, list[ClassificationHandle]] = {}
        self.request_done.connect(self._release)

    @property
    def last_request_id(self) -> int:
        return self._last_request_id

    def next_request_id(self) -> int:
        """Stamp a new request id; outcomes of every earlier request become stale."""
        self._last_request_id = next(self._ids)
        return self._last_request_id

    def make_request(self, image, orientation: int | None = None) -> InferenceRequest:
        """
        Decode ``image`` if needed and stamp a new request id.

        Parameters
        ----------
        image : PIL.Image, str, Path or bytes
            Decoded image, file path, or encoded bytes
        orientation : int, optional
            EXIF orientation (1-8). Read from the image when omitted.

        Raises
        ------
        ImageDecodeError
            If the image cannot be decoded
        """
        if not isinstance(image, Image.Image):
            image = load_image(image)
        if orientation is None:
            orientation = read_orientation(image)
        return InferenceRequest(self.next_request_id(), image.copy(), orientation)

    def run(self, image, orientation: int | None = None) -> list[ClassificationHandle]:
        """
        Classify an image with every model, without blocking the caller.

        Returns
        -------
        list of ClassificationHandle
            One handle per model, in ModelSet order. Each handle emits
            exactly one of ``finished``/``failed``; order across handles
            follows completion order.

        Notes
        -----
        The background task starts when control returns to the event loop,
        so continuations attached right after this call never miss an
        outcome.

        Raises
        ------
        ImageDecodeError
            If the image cannot be decoded
        """
        return self.dispatch(self.make_request(image, orientation))

    def dispatch(self, request: InferenceRequest) -> list[ClassificationHandle]:
        """Submit an already built request; see ``run``."""
        handles = [
            ClassificationHandle(request.request_id, clf.tag, parent=self)
            for clf in self.models
        ]
        self._active[request.request_id] = handles
        # start once control returns to the event loop so callers can attach first
        QTimer.singleShot(0, self, functools.partial(submit, self._classify, request, handles))
        return handles

    def _classify(self, request: InferenceRequest, handles):
        # runs on a worker thread
        try:
            try:
                image = normalize_orientation(request.image, request.orientation)
            except Exception as e:
                logger.exception("Failed to prepare image for request %d", request.request_id)
                for handle in handles:
                    handle.failed.emit(InferenceFailure(request.request_id, handle.tag, str(e)))
                return

            for clf, handle in zip(self.models, handles):
                outcome = self._predict_one(request.request_id, clf, image)
                if isinstance(outcome, InferenceResult):
                    handle.finished.emit(outcome)
                else:
                    handle.failed.emit(outcome)
        finally:
            self.request_done.emit(request.request_id)

    def _predict_one(self, request_id: int, clf, image):
        try:
            score = clf.predict(image)
        except Exception as e:
            logger.exception("Model '%s' failed on request %d", clf.tag, request_id)
            return InferenceFailure(request_id, clf.tag, str(e))
        if score is None:
            logger.error("Model '%s' returned no result for request %d", clf.tag, request_id)
            return InferenceFailure(request_id, clf.tag, "no result")
        try:
            return InferenceResult(request_id, clf.tag, float(score))
        except (TypeError, ValueError) as e:
            logger.error("Model '%s' returned an invalid score: %s", clf.tag, e)
            return InferenceFailure(request_id, clf.tag, str(e))

    @Slot(int)
    def _release(self, request_id: int):
        for handle in self._active.pop(request_id, []):
            handle.deleteLater()
