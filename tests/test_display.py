import pytest

from otofind_ui.core import config
from otofind_ui.core.display import (
    Classifying,
    Entry,
    Failed,
    Idle,
    InferenceFailure,
    InferenceResult,
    MergePolicy,
    Showing,
    apply_failure,
    apply_result,
    apply_timeout,
    format_percentage,
    render,
)

from conftest import AOM, CSOM


@pytest.mark.parametrize(
    "score, expected",
    [
        (0.873, "87.3"),
        (0.021, "2.1"),
        (1.0, "100"),
        (0.0, "0"),
        (0.5, "50"),
        (0.12346, "12.35"),
    ],
)
def test_format_percentage(score, expected):
    assert format_percentage(score) == expected


def test_format_percentage_precision():
    assert format_percentage(0.123456, precision=4) == "12.3456"
    assert format_percentage(0.873, precision=0) == "87"


def test_format_percentage_float32_noise():
    # float32(0.873) widened to float64
    assert format_percentage(0.8730000257492065) == "87.3"


def test_render_idle_and_classifying():
    assert render(Idle()) == config.IDLE_TEXT
    assert render(Classifying(1)) == "Classifying..."


def test_two_results_render_two_lines():
    state = Classifying(1)
    state = apply_result(state, InferenceResult(1, AOM, 0.873))
    state = apply_result(state, InferenceResult(1, CSOM, 0.021))
    assert render(state) == (
        "Acute Otitis Media: 87.3%\nChronic Suppurative Otitis Media: 2.1%"
    )
    assert state.tags == (AOM, CSOM)


def test_arrival_order_is_display_order():
    state = Classifying(1)
    state = apply_result(state, InferenceResult(1, CSOM, 0.021))
    state = apply_result(state, InferenceResult(1, AOM, 0.873))
    assert render(state).splitlines() == [
        "Chronic Suppurative Otitis Media: 2.1%",
        "Acute Otitis Media: 87.3%",
    ]


def test_repeated_tag_replaces_its_line():
    state = Showing(1, (Entry(AOM, 0.1),))
    state = apply_result(state, InferenceResult(1, AOM, 0.2))
    assert state.entries == (Entry(AOM, 0.2),)


def test_failure_replaces_partial_results():
    state = apply_result(Classifying(1), InferenceResult(1, CSOM, 0.021))
    assert render(state) == "Chronic Suppurative Otitis Media: 2.1%"

    state = apply_failure(state, InferenceFailure(1, AOM, "no result"))
    assert state == Failed(1)
    assert render(state) == "An error has occured."


def test_result_after_failure_does_not_resurrect_display():
    state = apply_failure(Classifying(1), InferenceFailure(1, AOM, "boom"))
    state = apply_result(state, InferenceResult(1, CSOM, 0.5))
    assert render(state) == "An error has occured."


def test_isolated_policy_keeps_other_results():
    state = apply_result(Classifying(1), InferenceResult(1, CSOM, 0.021))
    state = apply_failure(
        state, InferenceFailure(1, AOM, "boom"), policy=MergePolicy.ISOLATED
    )
    assert isinstance(state, Showing)
    assert render(state) == (
        "Chronic Suppurative Otitis Media: 2.1%\nAcute Otitis Media: An error has occured."
    )


def test_isolated_failure_first():
    state = apply_failure(
        Classifying(1), InferenceFailure(1, AOM, "boom"), policy=MergePolicy.ISOLATED
    )
    state = apply_result(state, InferenceResult(1, CSOM, 0.021))
    assert len(state.entries) == 2
    assert state.entries[0].score is None


def test_stale_outcomes_are_ignored():
    state = Classifying(2)
    assert apply_result(state, InferenceResult(1, AOM, 0.9)) is state
    assert apply_failure(state, InferenceFailure(1, AOM, "late")) is state
    assert apply_result(Idle(), InferenceResult(1, AOM, 0.9)) == Idle()


def test_timeout_fails_incomplete_request():
    assert apply_timeout(Classifying(3), 3, expected=2) == Failed(3)
    partial = Showing(3, (Entry(AOM, 0.4),))
    assert apply_timeout(partial, 3, expected=2) == Failed(3)


def test_timeout_leaves_complete_or_other_requests_alone():
    done = Showing(3, (Entry(AOM, 0.4), Entry(CSOM, 0.1)))
    assert apply_timeout(done, 3, expected=2) is done
    newer = Classifying(4)
    assert apply_timeout(newer, 3, expected=2) is newer


@pytest.mark.parametrize("score", [-0.1, 1.5, float("nan"), float("inf")])
def test_inference_result_rejects_invalid_scores(score):
    with pytest.raises(ValueError):
        InferenceResult(1, AOM, score)


def test_formatting_is_deterministic():
    def run():
        state = apply_result(Classifying(1), InferenceResult(1, AOM, 0.873))
        return render(apply_result(state, InferenceResult(1, CSOM, 0.021)))

    assert run() == run()
