"""Main classification window for OtoFind."""

import logging

import numpy as np
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from otofind_ui.core import config
from otofind_ui.core.display import MergePolicy
from otofind_ui.core.formatter import ResultFormatter
from otofind_ui.core.image_io import ImageDecodeError, load_image, normalize_orientation, read_orientation
from otofind_ui.core.runner import InferenceRunner
from otofind_ui.ui.camera_dialog import CameraDialog, camera_available, qimage_to_png_bytes

logger = logging.getLogger(__name__)

CAMERA = "camera"
LIBRARY = "library"


def pil_to_qpixmap(pil_image) -> QPixmap:
    """Convert a PIL image to an RGB QPixmap."""
    if pil_image.mode != "RGB":
        pil_image = pil_image.convert("RGB")
    img_array = np.ascontiguousarray(np.array(pil_image))
    height, width, _ = img_array.shape
    q_image = QImage(
        img_array.data,
        width,
        height,
        3 * width,
        QImage.Format.Format_RGB888,
    )
    # QImage does not own the numpy buffer
    return QPixmap.fromImage(q_image.copy())


class ClassificationWindow(QMainWindow):
    """
    Single-screen window: one button, the chosen photo, and the scores.

    Parameters
    ----------
    models : ModelSet
        Loaded classifiers
    policy : MergePolicy, default=MergePolicy.REPLACE
        How a failing model combines with the other results
    timeout_ms : int, default=config.RESULT_TIMEOUT_MS
        Bound after which an incomplete request shows the error text
    parent : QWidget, optional
        Parent widget, by default None

    Attributes
    ----------
    runner : InferenceRunner
        Background dispatch of the model set
    formatter : ResultFormatter
        Owner of the classification display state
    image_label : QLabel
        Shows the photo being classified
    classification_label : QLabel
        Shows the display state text
    """

    def __init__(
        self,
        models,
        policy: MergePolicy = MergePolicy.REPLACE,
        timeout_ms: int = config.RESULT_TIMEOUT_MS,
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle("OtoFind")
        self.setMinimumSize(480, 640)

        self.runner = InferenceRunner(models, parent=self)
        self.formatter = ResultFormatter(
            expected=len(models), policy=policy, timeout_ms=timeout_ms, parent=self
        )
        self.formatter.state_changed.connect(self._on_state_changed)

        self._setup_ui()

    def _setup_ui(self):
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout(central_widget)

        self.image_label = QLabel()
        self.image_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.image_label.setMinimumSize(400, 400)
        self.image_label.setStyleSheet("border: 2px solid #ccc; background: #f5f5f5;")
        layout.addWidget(self.image_label, stretch=1)

        self.classification_label = QLabel(self.formatter.text)
        self.classification_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.classification_label.setWordWrap(True)
        self.classification_label.setStyleSheet("font-size: 16px; margin: 10px;")
        layout.addWidget(self.classification_label)

        self.camera_button = QPushButton("Take Picture")
        self.camera_button.clicked.connect(self.take_picture)
        layout.addWidget(self.camera_button)

    # ------------------------------------------------------------------
    # image acquisition
    # ------------------------------------------------------------------
    @Slot()
    def take_picture(self):
        """Offer camera or library when a camera exists, else open the library."""
        if not camera_available():
            self.present_photo_picker(LIBRARY)
            return

        box = QMessageBox(self)
        box.setWindowTitle(config.PICKER_TITLE)
        box.setText(config.PICKER_MESSAGE)
        take_photo = box.addButton("Take Photo", QMessageBox.ButtonRole.AcceptRole)
        choose_photo = box.addButton("Choose Photo", QMessageBox.ButtonRole.AcceptRole)
        box.addButton(QMessageBox.StandardButton.Cancel)
        box.exec()

        if box.clickedButton() is take_photo:
            self.present_photo_picker(CAMERA)
        elif box.clickedButton() is choose_photo:
            self.present_photo_picker(LIBRARY)

    def present_photo_picker(self, source: str):
        if source == CAMERA:
            dialog = CameraDialog(self)
            dialog.exec()
            if dialog.captured is None:
                return
            self.show_and_classify(qimage_to_png_bytes(dialog.captured))
        elif source == LIBRARY:
            file_path, _ = QFileDialog.getOpenFileName(
                self,
                "Choose an Image",
                "",
                "Image Files (*.png *.jpg *.jpeg *.bmp);;All Files (*)",
            )
            if file_path:
                self.show_and_classify(file_path)
        else:
            raise ValueError(f"Unknown image source: {source}")

    def show_and_classify(self, source):
        """Decode ``source``, display it upright, and classify it."""
        try:
            image = load_image(source)
        except ImageDecodeError as e:
            self._report_decode_error(e)
            return
        orientation = read_orientation(image)
        self.image_label.setPixmap(
            pil_to_qpixmap(normalize_orientation(image, orientation)).scaled(
                400,
                400,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            )
        )
        self.update_classifications(image, orientation)

    # ------------------------------------------------------------------
    # classification
    # ------------------------------------------------------------------
    def update_classifications(self, image, orientation=None):
        """
        Start classifying an image.

        The label switches to "Classifying..." before this method returns;
        results arrive later through the formatter.

        Returns
        -------
        list of ClassificationHandle
            One per model, or an empty list if the image could not be decoded
        """
        try:
            request = self.runner.make_request(image, orientation)
        except ImageDecodeError as e:
            self._report_decode_error(e)
            return []
        self.formatter.begin(request.request_id)
        handles = self.runner.dispatch(request)
        self.formatter.attach(handles)
        return handles

    def _report_decode_error(self, error):
        logger.error("%s", error)
        self.formatter.fail(self.runner.next_request_id(), f"Unable to open image:\n{error}")

    @Slot(object)
    def _on_state_changed(self, _state):
        self.classification_label.setText(self.formatter.text)
