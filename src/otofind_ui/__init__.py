"""
OtoFind: Otitis Media Screening from Eardrum Photographs
========================================================

OtoFind is a desktop GUI that classifies a photo of the tympanic membrane,
taken through a smartphone otoscope attachment or chosen from disk, with two
pretrained scalar classifiers:

1. **Acute Otitis Media** (``aom``)
2. **Chronic Suppurative Otitis Media** (``csom``)

Each model reports an independent probability, shown as a percentage.
The scores are screening aids, not a diagnosis.

Quick Start
-----------
>>> from otofind_ui.core import load_model_set, load_image
>>>
>>> models = load_model_set(model_dir="~/.otofind/models")
>>> img = load_image("eardrum.jpg")
>>> for clf in models:
...     print(clf.tag, clf.predict(img))

Main Modules
------------
models
    Model backend: architecture wrapper, checkpoint loading, preprocessing
core
    Application logic: image I/O, model set, inference runner, display state
ui
    PySide6 GUI components

See Also
--------
README.md : Project overview and installation instructions
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
