"""
Background Task Execution
==========================

This module runs work off the GUI thread on Qt's global QThreadPool, the
single background context shared by every classification request.

Classes
-------
TaskSignals
    Qt signals for communicating task results/errors from worker threads
Task
    QRunnable wrapper for executing arbitrary functions in background

Functions
---------
submit
    Submit a function for background execution
wait_for_tasks
    Block until every submitted task has finished

Notes
-----
Signals are emitted from the worker thread. Connect them to slots of
QObjects living on the GUI thread so Qt queues delivery onto the event
loop.

Examples
--------
>>> from otofind_ui.core.tasks import submit
>>>
>>> signals = submit(sum, [1, 2, 3])
>>> signals.finished.connect(window.on_total)
>>> signals.error.connect(window.on_error)

See Also
--------
otofind_ui.core.runner : Dispatches model inference with submit()
"""

import logging

from PySide6.QtCore import QObject, Signal, QRunnable, QThreadPool

logger = logging.getLogger(__name__)


class TaskSignals(QObject):
    """
    Qt signals for communicating task status from worker threads.

    Signals
    -------
    finished : Signal(object)
        Emitted when task completes successfully, carries return value
    error : Signal(str)
        Emitted when task raises exception, carries error message
    """

    finished = Signal(object)
    error = Signal(str)


class Task(QRunnable):
    """
    Background task wrapper for executing functions in Qt thread pool.

    Parameters
    ----------
    fn : callable
        Function to execute in background
    *args : tuple
        Positional arguments to pass to fn
    **kwargs : dict
        Keyword arguments to pass to fn

    Notes
    -----
    Exceptions raised by fn are logged with their traceback and converted
    to an ``error`` signal carrying the exception message.
    """

    def __init__(self, fn, *args, **kwargs):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = TaskSignals()

    def run(self):
        try:
            res = self.fn(*self.args, **self.kwargs)
        except Exception as e:
            logger.exception("Background task %s failed", getattr(self.fn, "__name__", self.fn))
            self.signals.error.emit(str(e))
            return
        self.signals.finished.emit(res)


_pool = QThreadPool.globalInstance()


def submit(fn, *args, **kwargs):
    """
    Submit a function for background execution in the global thread pool.

    Parameters
    ----------
    fn : callable
        Function to execute in background
    *args : tuple
        Positional arguments for fn
    **kwargs : dict
        Keyword arguments for fn

    Returns
    -------
    TaskSignals
        Signal object with finished/error signals. The object is created on
        the calling thread.
    """
    t = Task(fn, *args, **kwargs)
    _pool.start(t)
    return t.signals


def wait_for_tasks(timeout_ms: int = -1) -> bool:
    """
    Block until the pool is idle.

    Parameters
    ----------
    timeout_ms : int, default=-1
        Maximum wait in milliseconds; -1 waits indefinitely

    Returns
    -------
    bool
        True if every task finished before the timeout
    """
    return _pool.waitForDone(timeout_ms)
