#!/usr/bin/env python
"""
OtoFind GUI Application Entry Point.

This script loads the configured models and launches the classification
window. Model directory and device can be overridden with the
``OTOFIND_MODEL_DIR`` and ``OTOFIND_DEVICE`` environment variables.
"""

import logging
import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from PySide6.QtWidgets import QApplication, QMessageBox  # noqa: E402
from otofind_ui.core.model_manager import ModelLoadError, load_model_set  # noqa: E402
from otofind_ui.ui.main_window import ClassificationWindow  # noqa: E402

logger = logging.getLogger("otofind")


def main():
    """
    Launch the OtoFind GUI application.

    Returns
    -------
    int
        Exit code (0 for success, 1 if the models could not be loaded)
    """
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    # Create application
    app = QApplication(sys.argv)
    app.setApplicationName("OtoFind")
    app.setOrganizationName("OtoFind")
    app.setStyle("Fusion")

    try:
        models = load_model_set()
    except ModelLoadError as e:
        logger.error("%s", e)
        QMessageBox.critical(None, "OtoFind setup error", str(e))
        return 1

    window = ClassificationWindow(models)
    window.show()

    # Start event loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
