"""
Core Application Logic for OtoFind
==================================

This module contains the logic behind the classification window:

- **Image I/O**: Decoding and EXIF orientation normalization
- **Model management**: Explicit, all-or-nothing loading of the model set
- **Inference runner**: Background dispatch with one handle per model
- **Display state**: Immutable states and pure merge transitions
- **Result formatter**: GUI-thread owner of the display state
- **Background tasks**: Thread pool execution for long-running operations

Request Flow
------------
1. ``InferenceRunner.make_request`` decodes the image and stamps an id
2. ``ResultFormatter.begin`` shows "Classifying..." synchronously
3. A background task normalizes orientation and runs each model in turn
4. Each model's handle emits ``finished`` or ``failed``
5. ``ResultFormatter`` folds the outcome into the display on the GUI thread

Examples
--------
>>> from otofind_ui.core import load_model_set, InferenceRunner, ResultFormatter
>>>
>>> models = load_model_set()
>>> runner = InferenceRunner(models)
>>> formatter = ResultFormatter(expected=len(models))
>>> handles = runner.run("eardrum.jpg")
>>> formatter.begin(runner.last_request_id)
>>> formatter.attach(handles)

Modules
-------
config
    Model names, device, timeout and display strings
image_io
    Image decoding and orientation handling
model_manager
    ModelSet loading
runner
    Background inference dispatch
display
    Display states, merge policies and text rendering
formatter
    Display state owner
tasks
    QThreadPool wrapper for background task execution

See Also
--------
otofind_ui.models : Model loading and preprocessing
otofind_ui.ui : PySide6 GUI components
"""

from .display import (
    Classifying,
    Failed,
    Idle,
    InferenceFailure,
    InferenceResult,
    MergePolicy,
    Showing,
    render,
)
from .formatter import ResultFormatter
from .image_io import ImageDecodeError, load_image, normalize_orientation, read_orientation
from .model_manager import ModelLoadError, ModelSet, ScalarClassifier, load_model_set
from .runner import ClassificationHandle, InferenceRequest, InferenceRunner
from .tasks import submit

__all__ = [
    "Classifying",
    "Failed",
    "Idle",
    "InferenceFailure",
    "InferenceResult",
    "MergePolicy",
    "Showing",
    "render",
    "ResultFormatter",
    "ImageDecodeError",
    "load_image",
    "normalize_orientation",
    "read_orientation",
    "ModelLoadError",
    "ModelSet",
    "ScalarClassifier",
    "load_model_set",
    "ClassificationHandle",
    "InferenceRequest",
    "InferenceRunner",
    "submit",
]
