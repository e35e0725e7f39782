"""
Model Manager
=============

This module turns the model registry into the immutable set of classifiers
a classification window owns for its lifetime.

Classes
-------
ScalarClassifier
    One loaded model, its preprocessing transform and its display tag
ModelSet
    Ordered, uniquely tagged collection of classifiers
ModelLoadError
    Raised when any configured model cannot be loaded

Functions
---------
load_model_set
    Explicit initialization step: load every configured model or fail

Notes
-----
Loading is all-or-nothing. ``load_model_set`` raises ``ModelLoadError`` and
leaves the decision to retry, report or exit to the caller.

See Also
--------
otofind_ui.models.model_util : Low-level model loading functions
otofind_ui.core.runner : Runs a ModelSet in the background
"""

import logging

import torch

from otofind_ui.core import config
from otofind_ui.models.model_util import (
    MODEL_CONFIGS,
    get_preprocessing_transforms,
    load_pretrained_model,
    resolve_device,
)

logger = logging.getLogger(__name__)


class ModelLoadError(RuntimeError):
    """Raised when a configured model cannot be loaded."""

    def __init__(self, model_name: str, cause: Exception):
        super().__init__(f"Failed to load model '{model_name}': {cause}")
        self.model_name = model_name
        self.cause = cause


class ScalarClassifier:
    """
    A loaded model that maps an image to one confidence score.

    Parameters
    ----------
    tag : str
        Human-readable finding name shown next to the score
    model : torch.nn.Module
        Model in eval mode whose output holds a single value per image
    transform : callable
        Preprocessing applied to a PIL image, producing a (C, H, W) tensor
    device : torch.device
        Device the model lives on
    apply_sigmoid : bool, default=True
        Treat the model output as a logit. Set False for models that
        already emit a probability.

    Examples
    --------
    >>> clf = ScalarClassifier("Acute Otitis Media", model, transform, torch.device("cpu"))
    >>> clf.predict(img)
    0.873
    """

    def __init__(self, tag: str, model, transform, device, apply_sigmoid: bool = True):
        self.tag = tag
        self.model = model
        self.transform = transform
        self.device = torch.device(device)
        self.apply_sigmoid = apply_sigmoid

    def __repr__(self):
        return f"ScalarClassifier(tag={self.tag!r}, device={self.device})"

    @torch.inference_mode()
    def predict(self, image) -> float | None:
        """
        Run the model on one upright PIL image.

        Returns
        -------
        float or None
            First output value, or None when the model produced no output
        """
        x = self.transform(image).unsqueeze(0).to(self.device)
        out = self.model(x)
        if out is None or out.numel() == 0:
            return None
        if self.apply_sigmoid:
            out = torch.sigmoid(out)
        return float(out.flatten()[0].item())


class ModelSet:
    """
    Immutable, ordered collection of classifiers with unique tags.

    Parameters
    ----------
    classifiers : iterable
        Objects exposing ``tag`` and ``predict(image)``

    Raises
    ------
    ValueError
        If the collection is empty or two classifiers share a tag
    """

    def __init__(self, classifiers):
        classifiers = tuple(classifiers)
        if not classifiers:
            raise ValueError("ModelSet requires at least one classifier")
        tags = [c.tag for c in classifiers]
        dupes = sorted({t for t in tags if tags.count(t) > 1})
        if dupes:
            raise ValueError(f"Duplicate classifier tags: {', '.join(dupes)}")
        self._classifiers = classifiers

    def __iter__(self):
        return iter(self._classifiers)

    def __len__(self):
        return len(self._classifiers)

    def __getitem__(self, index):
        return self._classifiers[index]

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(c.tag for c in self._classifiers)


def load_model_set(
    model_names=config.DEFAULT_MODEL_NAMES,
    device=config.DEVICE,
    model_dir: str = config.MODEL_DIR,
) -> ModelSet:
    """
    Load every named model and return them as a ModelSet.

    Parameters
    ----------
    model_names : sequence of str
        Keys of MODEL_CONFIGS, in display order
    device : str or torch.device, default=config.DEVICE
        ``"auto"`` uses every available compute resource (CUDA, else CPU)
    model_dir : str, default=config.MODEL_DIR
        Directory holding ``<model_name>.pth`` checkpoints

    Returns
    -------
    ModelSet

    Raises
    ------
    ModelLoadError
        On the first model that fails to load, wrapping the cause

    Examples
    --------
    >>> try:
    ...     models = load_model_set()
    ... except ModelLoadError as e:
    ...     print(e)
    Failed to load model 'aom': Checkpoint for model 'aom' not found at ...
    """
    device = resolve_device(device)
    classifiers = []
    for name in model_names:
        try:
            model = load_pretrained_model(name, device=device, model_dir=model_dir)
            transform = get_preprocessing_transforms(name)
        except Exception as e:
            raise ModelLoadError(name, e) from e
        classifiers.append(
            ScalarClassifier(MODEL_CONFIGS[name]["tag"], model, transform, device)
        )
    logger.info("Loaded %d models: %s", len(classifiers), ", ".join(model_names))
    return ModelSet(classifiers)
