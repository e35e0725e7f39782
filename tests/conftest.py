import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402
from PIL import Image  # noqa: E402
from PySide6.QtCore import QCoreApplication, QEvent  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from otofind_ui.core.tasks import wait_for_tasks  # noqa: E402

AOM = "Acute Otitis Media"
CSOM = "Chronic Suppurative Otitis Media"


class FakeClassifier:
    """Deterministic stand-in for ScalarClassifier."""

    def __init__(self, tag, score=None, error=None):
        self.tag = tag
        self.score = score
        self.error = error
        self.seen_sizes = []

    def predict(self, image):
        self.seen_sizes.append(image.size)
        if self.error is not None:
            raise self.error
        return self.score


def flush_events():
    """Start deferred tasks, wait for the pool, then deliver queued signals."""
    QCoreApplication.processEvents()
    assert wait_for_tasks(5000)
    QCoreApplication.processEvents()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)
    QCoreApplication.processEvents()


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def eardrum_image():
    img = Image.new("RGB", (64, 48), (180, 90, 80))
    for x in range(16):
        img.putpixel((x, 0), (255, 255, 255))
    return img


@pytest.fixture
def eardrum_png(tmp_path, eardrum_image):
    path = tmp_path / "eardrum.png"
    eardrum_image.save(path)
    return path
