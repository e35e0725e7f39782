"""
UI Components for OtoFind
=========================

This module provides the PySide6 interface of the OtoFind desktop
application: a single window that classifies a photo of the eardrum.

Workflow
--------
1. Press **Take Picture**
2. If a camera is present, choose **Take Photo** or **Choose Photo**;
   otherwise the file dialog opens directly
3. The photo is shown upright and the label switches to "Classifying..."
4. Each model's score appears as ``"<finding>: <percent>%"`` when it is ready

UI Components
-------------
ClassificationWindow
    Main window: photo, classification label, capture button
CameraDialog
    Live camera preview with a capture button

Architecture Notes
------------------
- Inference runs on the background pool via ``core.runner.InferenceRunner``
- The label text is owned by ``core.formatter.ResultFormatter`` and only
  changes on the GUI thread
- Models are loaded once, before the window is built

Examples
--------
>>> from PySide6.QtWidgets import QApplication
>>> from otofind_ui.core import load_model_set
>>> from otofind_ui.ui import ClassificationWindow
>>> import sys
>>>
>>> app = QApplication(sys.argv)
>>> window = ClassificationWindow(load_model_set())
>>> window.show()
>>> sys.exit(app.exec())

See Also
--------
otofind_ui.core : Application logic and display state
apps.gui_app : Entry point for launching the GUI
"""

from .camera_dialog import CameraDialog, camera_available
from .main_window import ClassificationWindow

__all__ = ["CameraDialog", "camera_available", "ClassificationWindow"]
