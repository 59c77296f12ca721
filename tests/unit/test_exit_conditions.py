from services.exit_conditions import (
    BOTTOM_OUT_CLOSING,
    POOR_CLOSING,
    SUCCESS_CLOSING,
    closing_for,
    evaluate_exit,
    is_wrapup_signal,
    timeout_decision,
)


def test_success_beats_everything():
    decision = evaluate_exit(100, 3, "One last question for you")
    assert decision.action == "terminate"
    assert decision.exit_reason == "success_100"
    assert decision.closing_message == SUCCESS_CLOSING


def test_poor_streak_beats_bottom_out():
    decision = evaluate_exit(0, 3, "Tell me more")
    assert decision.exit_reason == "poor_responses"
    assert decision.closing_message == POOR_CLOSING


def test_bottom_out():
    decision = evaluate_exit(0, 1, "Tell me more")
    assert decision.exit_reason == "bottom_out"
    assert decision.closing_message == BOTTOM_OUT_CLOSING


def test_wrapup_signal_sets_wrapping_up():
    decision = evaluate_exit(60, 0, "Great chat! I've got a good read on you. Any questions?")
    assert decision.action == "wrap_up"
    assert decision.exit_reason is None


def test_continue_when_nothing_fires():
    decision = evaluate_exit(60, 2, "What did you build next?")
    assert decision.action == "continue"
    assert not decision.is_terminal


def test_wrapup_phrases_case_insensitive():
    assert is_wrapup_signal("FINAL QUESTION: what excites you?")
    assert is_wrapup_signal("Let's wrap this up soon")
    assert not is_wrapup_signal("What was your first project?")


def test_timeout_decision_and_named_closing():
    decision = timeout_decision()
    assert decision.exit_reason == "timeout"
    assert decision.closing_message.startswith("Time's up!")
    assert "Asha" in closing_for("normal_wrapup", "Asha")
