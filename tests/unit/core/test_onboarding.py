"""Tests for onboarding progress tracking."""

from core.onboarding import OnboardingSteps


def test_fresh_player_has_four_pending_steps():
    steps = OnboardingSteps([1, 2, 3, 4])
    assert steps.pending == [1, 2, 3, 4]
    assert steps.next_step == 1
    assert not steps.is_complete


def test_steps_are_deduplicated_and_sorted():
    assert OnboardingSteps([3, 1, 3, 2]).pending == [1, 2, 3]


def test_completing_out_of_order():
    steps = OnboardingSteps([1, 2, 3, 4]).mark_complete(3)
    assert steps.pending == [1, 2, 4]
    assert steps.next_step == 1


def test_completing_a_finished_step_is_a_no_op():
    steps = OnboardingSteps([2])
    steps.mark_complete(1)
    assert steps.pending == [2]
    assert not steps.is_pending(1)


def test_status_after_last_step():
    steps = OnboardingSteps([2]).mark_complete(2)
    assert steps.status(2) == {
        "onboardingSteps": [],
        "completedStep": 2,
        "isOnboardingComplete": True,
        "nextStep": None,
    }


def test_none_means_complete():
    assert OnboardingSteps(None).is_complete
