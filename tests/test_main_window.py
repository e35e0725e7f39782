import pytest

from otofind_ui.core import config
from otofind_ui.core.display import Failed, MergePolicy, Showing
from otofind_ui.core.model_manager import ModelSet
from otofind_ui.ui.main_window import ClassificationWindow, pil_to_qpixmap

from conftest import AOM, CSOM, FakeClassifier, flush_events


@pytest.fixture
def window(qapp):
    models = ModelSet([FakeClassifier(AOM, 0.873), FakeClassifier(CSOM, 0.021)])
    win = ClassificationWindow(models)
    yield win
    flush_events()
    win.close()


def test_initial_label_is_idle(window):
    assert window.classification_label.text() == config.IDLE_TEXT


def test_label_shows_classifying_immediately(window, eardrum_image):
    handles = window.update_classifications(eardrum_image)
    assert len(handles) == 2
    assert window.classification_label.text() == "Classifying..."


def test_label_shows_both_scores(window, eardrum_image):
    window.update_classifications(eardrum_image)
    flush_events()
    assert isinstance(window.formatter.state, Showing)
    assert sorted(window.classification_label.text().splitlines()) == [
        "Acute Otitis Media: 87.3%",
        "Chronic Suppurative Otitis Media: 2.1%",
    ]


def test_show_and_classify_from_file(window, eardrum_png):
    window.show_and_classify(str(eardrum_png))
    assert window.image_label.pixmap() is not None
    assert not window.image_label.pixmap().isNull()
    flush_events()
    assert len(window.classification_label.text().splitlines()) == 2


def test_undecodable_file_reports_error(window, tmp_path):
    bad = tmp_path / "broken.jpg"
    bad.write_bytes(b"not a jpeg")
    window.show_and_classify(str(bad))
    assert window.classification_label.text().startswith("Unable to open image")
    assert isinstance(window.formatter.state, Failed)
    assert window.runner.last_request_id == 1


def test_undecodable_file_survives_late_results(window, eardrum_image, tmp_path):
    bad = tmp_path / "broken.jpg"
    bad.write_bytes(b"not a jpeg")
    window.update_classifications(eardrum_image)
    window.show_and_classify(str(bad))
    flush_events()

    assert window.classification_label.text().startswith("Unable to open image")
    assert window.formatter.state.request_id == window.runner.last_request_id


def test_failing_model_shows_error(qapp, eardrum_image):
    models = ModelSet([FakeClassifier(CSOM, 0.021), FakeClassifier(AOM, None)])
    win = ClassificationWindow(models)
    win.update_classifications(eardrum_image)
    flush_events()
    assert isinstance(win.formatter.state, Failed)
    assert win.classification_label.text() == "An error has occured."
    win.close()


def test_isolated_policy_window(qapp, eardrum_image):
    models = ModelSet([FakeClassifier(CSOM, 0.021), FakeClassifier(AOM, None)])
    win = ClassificationWindow(models, policy=MergePolicy.ISOLATED)
    win.update_classifications(eardrum_image)
    flush_events()
    assert win.classification_label.text().splitlines() == [
        "Chronic Suppurative Otitis Media: 2.1%",
        "Acute Otitis Media: An error has occured.",
    ]
    win.close()


def test_present_photo_picker_rejects_unknown_source(window):
    with pytest.raises(ValueError):
        window.present_photo_picker("scanner")


def test_pil_to_qpixmap_converts_grayscale(qapp, eardrum_image):
    pixmap = pil_to_qpixmap(eardrum_image.convert("L"))
    assert (pixmap.width(), pixmap.height()) == (64, 48)
