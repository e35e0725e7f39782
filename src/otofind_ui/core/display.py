"""
Display State
=============

Value types describing what the classification label shows, and the pure
transitions that fold inference outcomes into them.

States
------
Idle
    Nothing requested yet
Classifying
    A request is in flight and no model has reported
Showing
    One entry per model that has reported, in arrival order
Failed
    The whole display replaced by an error message

Merge policies
--------------
``MergePolicy.REPLACE`` reproduces the original behaviour: a model failure
replaces every line, including results already shown, with the error
string. ``MergePolicy.ISOLATED`` keeps the other models' lines and marks
only the failing model's slot.

Examples
--------
>>> state = Classifying(request_id=1)
>>> state = apply_result(state, InferenceResult(1, "Acute Otitis Media", 0.873))
>>> state = apply_result(state, InferenceResult(1, "Chronic Suppurative Otitis Media", 0.021))
>>> print(render(state))
Acute Otitis Media: 87.3%
Chronic Suppurative Otitis Media: 2.1%
"""

import enum
import math
from dataclasses import dataclass

from otofind_ui.core import config


class MergePolicy(enum.Enum):
    REPLACE = "replace"
    ISOLATED = "isolated"


@dataclass(frozen=True)
class InferenceResult:
    """Score produced by one model for one request."""

    request_id: int
    tag: str
    score: float

    def __post_init__(self):
        if not isinstance(self.score, (int, float)) or not math.isfinite(self.score):
            raise ValueError(f"Score for '{self.tag}' is not a finite number: {self.score!r}")
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Score for '{self.tag}' outside [0, 1]: {self.score!r}")


@dataclass(frozen=True)
class InferenceFailure:
    """A model that raised, or returned nothing, for one request."""

    request_id: int
    tag: str
    message: str


@dataclass(frozen=True)
class Entry:
    """One line of the Showing state; ``score`` is None for a failed slot."""

    tag: str
    score: float | None = None
    error: str | None = None


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Classifying:
    request_id: int


@dataclass(frozen=True)
class Showing:
    request_id: int
    entries: tuple[Entry, ...]

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(e.tag for e in self.entries)


@dataclass(frozen=True)
class Failed:
    request_id: int
    message: str = config.ERROR_TEXT


def format_percentage(score: float, precision: int = config.SCORE_PRECISION) -> str:
    """
    Render ``score * 100`` with at most ``precision`` decimals.

    Trailing zeros and a trailing decimal point are stripped.

    Examples
    --------
    >>> format_percentage(0.873)
    '87.3'
    >>> format_percentage(1.0)
    '100'
    """
    text = f"{round(score * 100.0, precision):.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_entry(entry: Entry, precision: int = config.SCORE_PRECISION) -> str:
    if entry.score is None:
        return f"{entry.tag}: {entry.error or config.ERROR_TEXT}"
    return f"{entry.tag}: {format_percentage(entry.score, precision)}%"


def render(state, precision: int = config.SCORE_PRECISION) -> str:
    """Text shown in the classification label for a state."""
    if isinstance(state, Idle):
        return config.IDLE_TEXT
    if isinstance(state, Classifying):
        return config.CLASSIFYING_TEXT
    if isinstance(state, Showing):
        return "\n".join(format_entry(e, precision) for e in state.entries)
    if isinstance(state, Failed):
        return state.message
    raise TypeError(f"Unknown display state: {state!r}")


def current_request(state) -> int | None:
    return getattr(state, "request_id", None)


def _upsert(entries: tuple[Entry, ...], entry: Entry) -> tuple[Entry, ...]:
    for i, existing in enumerate(entries):
        if existing.tag == entry.tag:
            return entries[:i] + (entry,) + entries[i + 1 :]
    return entries + (entry,)


def apply_result(state, result: InferenceResult):
    """
    Fold a successful result into the state.

    Results for another request, and results arriving after the display
    failed, leave the state unchanged. A repeated tag replaces its line so
    each tag appears once.
    """
    if current_request(state) != result.request_id:
        return state
    entry = Entry(result.tag, result.score)
    if isinstance(state, Classifying):
        return Showing(result.request_id, (entry,))
    if isinstance(state, Showing):
        return Showing(state.request_id, _upsert(state.entries, entry))
    return state


def apply_failure(state, failure: InferenceFailure, policy: MergePolicy = MergePolicy.REPLACE):
    """Fold a per-model failure into the state according to ``policy``."""
    if current_request(state) != failure.request_id:
        return state
    if isinstance(state, Failed):
        return state
    if policy is MergePolicy.REPLACE:
        return Failed(failure.request_id)
    entry = Entry(failure.tag, None, config.ERROR_TEXT)
    if isinstance(state, Classifying):
        return Showing(failure.request_id, (entry,))
    return Showing(state.request_id, _upsert(state.entries, entry))


def apply_timeout(state, request_id: int, expected: int):
    """
    Move a request that has not heard from every model to Failed.

    ``expected`` is the number of configured models. Completed requests are
    left alone.
    """
    if current_request(state) != request_id:
        return state
    if isinstance(state, Classifying):
        return Failed(request_id)
    if isinstance(state, Showing) and len(state.entries) < expected:
        return Failed(request_id)
    return state
