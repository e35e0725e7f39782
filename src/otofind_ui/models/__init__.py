"""
Model Backend for Otitis Media Classification
==============================================

This module provides the model infrastructure behind OtoFind:

- **Pretrained model loading**: Local checkpoint loading with robust
  state-dict extraction
- **Unified model wrapper**: OtoModel turns a torchvision backbone into a
  scalar confidence regressor
- **Preprocessing transforms**: Center-crop pipeline matching training
- **Model registry**: Configuration database naming each model's tag

Available Models
----------------
- ``aom`` : Acute Otitis Media
- ``csom`` : Chronic Suppurative Otitis Media

Examples
--------
>>> from otofind_ui.models import load_pretrained_model, get_preprocessing_transforms
>>> model = load_pretrained_model("csom")
>>> transform = get_preprocessing_transforms("csom")

See Also
--------
otofind_ui.core.model_manager : Loads the configured model set for the GUI
"""

from .model import OtoModel, init_weights
from .model_util import (
    MODEL_CONFIGS,
    build_model,
    checkpoint_path,
    get_preprocessing_transforms,
    list_available_models,
    load_pretrained_model,
    resolve_device,
)

__all__ = [
    "OtoModel",
    "init_weights",
    "MODEL_CONFIGS",
    "build_model",
    "checkpoint_path",
    "get_preprocessing_transforms",
    "list_available_models",
    "load_pretrained_model",
    "resolve_device",
]
