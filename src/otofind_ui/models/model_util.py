"""
Model Utilities for Otitis Media Classification
================================================

This module provides utilities for locating, loading, and preprocessing the
pretrained otoscopy classifiers. It handles:

- **Model registry**: Configuration database naming each model and its tag
- **Checkpoint loading**: Robust deserialization of local ``.pth`` files
- **Preprocessing transforms**: Center-crop pipeline matching training
- **Model construction**: Backbone selection and wrapper initialization

Available Models
----------------
The MODEL_CONFIGS dictionary contains metadata for all available models:

- aom : Acute Otitis Media (scalar probability)
- csom : Chronic Suppurative Otitis Media (scalar probability)

Critical Implementation Details
--------------------------------
**Center crop**: Every model resizes the shorter image side to its input
size and crops the centered square, so the tensor shape is fixed regardless
of the source aspect ratio.

**Orientation**: Transforms expect an image whose EXIF orientation has
already been applied (see ``otofind_ui.core.image_io.normalize_orientation``).

**No downloads**: Checkpoints are local artifacts. A missing file raises
``FileNotFoundError`` naming the expected path.

Examples
--------
>>> from otofind_ui.models.model_util import load_pretrained_model, get_preprocessing_transforms
>>> from PIL import Image
>>> import torch
>>>
>>> model = load_pretrained_model("aom", model_dir="~/.otofind/models")
>>> transform = get_preprocessing_transforms("aom")
>>>
>>> img = Image.open("eardrum.jpg")
>>> tensor = transform(img).unsqueeze(0)
>>> with torch.no_grad():
...     prob = torch.sigmoid(model(tensor)).item()
>>>
>>> print(f"P(AOM) = {prob:.4f}")
"""

import logging
from pathlib import Path
from typing import Optional, Dict, Any

import torch

logger = logging.getLogger(__name__)


MODEL_CONFIGS = {
    "aom": {
        "tag": "Acute Otitis Media",
        "description": "Binary detector for acute otitis media on otoscopic photographs",
        "input_size": 224,
        "architecture": "resnet18",
    },
    "csom": {
        "tag": "Chronic Suppurative Otitis Media",
        "description": "Binary detector for chronic suppurative otitis media on otoscopic photographs",
        "input_size": 224,
        "architecture": "resnet18",
    },
}

# ImageNet statistics, used by every torchvision backbone above.
IMAGENET_MEAN = [0.485, 0.456, 0.406]
IMAGENET_STD = [0.229, 0.224, 0.225]


def _get_config(model_name: str) -> Dict[str, Any]:
    if model_name not in MODEL_CONFIGS:
        available_models = ", ".join(MODEL_CONFIGS.keys())
        raise ValueError(
            f"Model '{model_name}' not found. Available models: {available_models}"
        )
    return MODEL_CONFIGS[model_name]


def resolve_device(device=None) -> torch.device:
    """
    Resolve a device specification to a ``torch.device``.

    Parameters
    ----------
    device : str, torch.device or None
        ``None`` and ``"auto"`` pick CUDA if available, otherwise CPU.

    Returns
    -------
    torch.device
    """
    if device is None or device == "auto":
        return torch.device("cuda" if torch.cuda.is_available() else "cpu")
    return torch.device(device)


def checkpoint_path(model_name: str, model_dir: str = "~/.otofind/models") -> Path:
    """
    Construct the full path to a model checkpoint.

    Parameters
    ----------
    model_name : str
        Name of the model (must be in MODEL_CONFIGS)
    model_dir : str or Path
        Directory holding checkpoints (supports ~ expansion)

    Returns
    -------
    Path
        ``<model_dir>/<model_name>.pth``

    Examples
    --------
    >>> checkpoint_path("aom", "/opt/otofind/models")
    PosixPath('/opt/otofind/models/aom.pth')
    """
    _get_config(model_name)
    return Path(model_dir).expanduser() / f"{model_name}.pth"


def _load_checkpoint(model_path, device):
    """
    Load a checkpoint, preferring the weights-only loader.

    Parameters
    ----------
    model_path : str or Path
        Path to the checkpoint file (.pth)
    device : torch.device
        Device to map tensors to during loading

    Returns
    -------
    dict or torch.nn.Module
        Loaded checkpoint (usually a dict with 'model_state_dict' key)

    Notes
    -----
    Checkpoints written with extra pickled metadata cannot be read with
    ``weights_only=True``; those fall back to the full unpickler.
    """
    try:
        return torch.load(model_path, map_location=device, weights_only=True)
    except Exception as e:
        logger.warning(
            "Weights-only load of %s failed (%s), retrying with full unpickler",
            model_path,
            e,
        )
    return torch.load(model_path, map_location=device, weights_only=False)


def build_model(model_name: str) -> torch.nn.Module:
    """
    Build the untrained architecture for a model, matching training setup.

    Parameters
    ----------
    model_name : str
        Name of the model (must be in MODEL_CONFIGS)

    Returns
    -------
    torch.nn.Module
        OtoModel instance with a randomly initialised backbone

    Raises
    ------
    ValueError
        If the model name or its architecture is unknown
    """
    from torchvision import models as tvm
    from otofind_ui.models.model import OtoModel

    config = _get_config(model_name)
    arch = config["architecture"]
    if arch != "resnet18":
        raise ValueError(f"Unknown architecture: {arch}")

    return OtoModel(tvm.resnet18(weights=None))


def load_pretrained_model(
    model_name: str,
    device: Optional[torch.device] = None,
    model_dir: str = "~/.otofind/models",
) -> torch.nn.Module:
    """
    Load a pretrained otoscopy model ready for inference.

    Parameters
    ----------
    model_name : str
        Name of the model to load (must be a key in MODEL_CONFIGS)
    device : torch.device or str, optional
        Device to load the model on. ``None`` or ``"auto"`` uses CUDA if
        available, otherwise CPU.
    model_dir : str, default="~/.otofind/models"
        Directory holding ``<model_name>.pth``

    Returns
    -------
    torch.nn.Module
        Loaded OtoModel in eval mode, moved to the resolved device

    Raises
    ------
    ValueError
        If model_name is not in MODEL_CONFIGS
    FileNotFoundError
        If the checkpoint file does not exist
    RuntimeError
        If the checkpoint does not match the architecture

    Notes
    -----
    The checkpoint may be a bare state dict or a dict wrapping it under
    ``model_state_dict`` or ``state_dict``.
    """
    device = resolve_device(device)
    config = _get_config(model_name)

    model_path = checkpoint_path(model_name, model_dir)
    if not model_path.exists():
        raise FileNotFoundError(
            f"Checkpoint for model '{model_name}' not found at {model_path}"
        )

    model = build_model(model_name).to(device)
    checkpoint = _load_checkpoint(model_path, device)

    # Extract state dict robustly
    if isinstance(checkpoint, dict):
        state = (
            checkpoint.get("model_state_dict")
            or checkpoint.get("state_dict")
            or checkpoint
        )
    elif isinstance(checkpoint, torch.nn.Module):
        state = checkpoint.state_dict()
    else:
        state = checkpoint

    model.load_state_dict(state, strict=True)
    model.eval()

    logger.info(
        "Loaded model '%s' (%s) on %s, input size %dx%d",
        model_name,
        config["tag"],
        device,
        config["input_size"],
        config["input_size"],
    )
    return model


def get_preprocessing_transforms(model_name: str):
    """
    Get the center-crop preprocessing transform for a model.

    Parameters
    ----------
    model_name : str
        Name of the model (must be a key in MODEL_CONFIGS)

    Returns
    -------
    torchvision.transforms.Compose
        RGB -> resize shorter side -> center crop -> tensor -> ImageNet
        normalize. Output shape is (3, input_size, input_size).

    Examples
    --------
    >>> transform = get_preprocessing_transforms("aom")
    >>> tensor = transform(Image.new("RGB", (640, 480)))
    >>> tensor.shape
    torch.Size([3, 224, 224])
    """
    from torchvision import transforms as T

    input_size = _get_config(model_name)["input_size"]

    return T.Compose(
        [
            T.Lambda(lambda x: x.convert("RGB") if x.mode != "RGB" else x),
            T.Resize(input_size, antialias=True),
            T.CenterCrop(input_size),
            T.ToTensor(),
            T.Normalize(mean=IMAGENET_MEAN, std=IMAGENET_STD),
        ]
    )


def list_available_models() -> Dict[str, Any]:
    """
    List all available models with their metadata.

    Returns
    -------
    dict
        Mapping of model name to a dict with 'tag', 'description',
        'architecture' and 'input_size'.

    Examples
    --------
    >>> for name, info in list_available_models().items():
    ...     print(f"{name}: {info['tag']}")
    aom: Acute Otitis Media
    csom: Chronic Suppurative Otitis Media
    """
    models_info = {}
    for name, config in MODEL_CONFIGS.items():
        models_info[name] = {
            "tag": config["tag"],
            "description": config["description"],
            "architecture": config["architecture"],
            "input_size": config["input_size"],
        }
    return models_info
