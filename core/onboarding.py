"""
Onboarding progress tracking.

Progress is stored as the list of step numbers that are still pending
(``[1, 2]`` for a fresh company, ``[1, 2, 3, 4]`` for a fresh player).
Completing a step removes it; onboarding is complete once nothing is left.
"""

from typing import Any, Iterable, Optional


class OnboardingSteps:
    """Pending-step set with the two transitions profile completion needs."""

    def __init__(self, pending: Optional[Iterable[int]] = None):
        self._pending: list[int] = sorted({int(step) for step in pending or []})

    @property
    def pending(self) -> list[int]:
        return list(self._pending)

    @property
    def is_complete(self) -> bool:
        return not self._pending

    @property
    def next_step(self) -> Optional[int]:
        return self._pending[0] if self._pending else None

    def is_pending(self, step: int) -> bool:
        return step in self._pending

    def mark_complete(self, step: int) -> "OnboardingSteps":
        """Remove ``step`` from the pending set. Unknown steps are a no-op."""
        if step in self._pending:
            self._pending.remove(step)
        return self

    def status(self, completed_step: int) -> dict[str, Any]:
        """Response payload describing progress after ``completed_step``."""
        return {
            "onboardingSteps": self.pending,
            "completedStep": completed_step,
            "isOnboardingComplete": self.is_complete,
            "nextStep": self.next_step,
        }

    def __repr__(self) -> str:
        return f"OnboardingSteps(pending={self._pending!r})"
