"""
Application configuration settings for OtoFind.
Contains model selection, runtime device, timing and display constants.
"""

import os

# --- Model Configuration ---

# Models loaded at window construction, in display order.
# Each name must be a key in otofind_ui.models.model_util.MODEL_CONFIGS.
DEFAULT_MODEL_NAMES = ("aom", "csom")

# Directory holding <model_name>.pth checkpoints.
MODEL_DIR = os.environ.get("OTOFIND_MODEL_DIR", "~/.otofind/models")

# "auto" selects CUDA when available and falls back to CPU,
# i.e. use every available compute resource.
DEVICE = os.environ.get("OTOFIND_DEVICE", "auto")

# --- Result Formatting ---

# Decimal places kept when rendering score * 100; trailing zeros are stripped.
SCORE_PRECISION = 2

# A request that has not heard back from every model within this bound is
# moved to the error state.
RESULT_TIMEOUT_MS = 30_000

# --- Display Strings ---

IDLE_TEXT = "Take or choose a photo of the eardrum."
CLASSIFYING_TEXT = "Classifying..."
ERROR_TEXT = "An error has occured."

PICKER_TITLE = "Take or Choose an Image"
PICKER_MESSAGE = (
    "Please use the included otoscope to take a photo with your camera, "
    "or choose one you have already taken from your photo library."
)
