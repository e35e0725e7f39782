"""Camera capture dialog for OtoFind."""

from PySide6.QtCore import QBuffer, QByteArray, QIODevice
from PySide6.QtMultimedia import QCamera, QImageCapture, QMediaCaptureSession, QMediaDevices
from PySide6.QtMultimediaWidgets import QVideoWidget
from PySide6.QtWidgets import QDialog, QHBoxLayout, QLabel, QPushButton, QVBoxLayout


def camera_available() -> bool:
    """Return True if at least one video input device is present."""
    return len(QMediaDevices.videoInputs()) > 0


def qimage_to_png_bytes(image) -> bytes:
    """
    Encode a QImage as PNG.

    Parameters
    ----------
    image : QImage
        Captured frame

    Returns
    -------
    bytes
        PNG-encoded image, suitable for ``core.image_io.load_image``
    """
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    image.save(buffer, "PNG")
    buffer.close()
    return bytes(data.data())


class CameraDialog(QDialog):
    """
    Live preview with a capture button.

    The dialog accepts as soon as a frame is captured; the frame is then
    available as ``captured`` (QImage).

    Parameters
    ----------
    parent : QWidget, optional
        Parent widget, by default None
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Take Photo")
        self.setMinimumSize(640, 520)
        self.captured = None

        self._camera = QCamera(QMediaDevices.defaultVideoInput())
        self._capture = QImageCapture()
        self._session = QMediaCaptureSession()
        self._session.setCamera(self._camera)
        self._session.setImageCapture(self._capture)

        layout = QVBoxLayout(self)
        preview = QVideoWidget()
        self._session.setVideoOutput(preview)
        layout.addWidget(preview, stretch=1)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #b00;")
        layout.addWidget(self.status_label)

        buttons = QHBoxLayout()
        self.capture_btn = QPushButton("Capture")
        self.capture_btn.clicked.connect(self._capture.capture)
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        buttons.addStretch(1)
        buttons.addWidget(cancel_btn)
        buttons.addWidget(self.capture_btn)
        layout.addLayout(buttons)

        self._capture.imageCaptured.connect(self._on_captured)
        self._capture.errorOccurred.connect(self._on_error)
        self._camera.start()

    def _on_captured(self, _request_id, image):
        self.captured = image
        self.accept()

    def _on_error(self, _request_id, _error, message):
        self.status_label.setText(f"Capture failed: {message}")

    def done(self, result):
        self._camera.stop()
        super().done(result)
