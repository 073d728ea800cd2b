"""
Countdown timer driving the OTP resend cooldown.

The timer holds no clock of its own: it is advanced by ticks pushed in
from outside (one per elapsed second), so a single ticker task drives
every timer and tests can advance time without waiting.
"""

from dataclasses import dataclass

DEFAULT_RESEND_SECONDS = 60


@dataclass
class CountdownTimer:
    """Per-flow resend cooldown; resend is allowed only at zero."""

    resend_timer: int = 0

    @property
    def can_resend(self) -> bool:
        return self.resend_timer == 0

    @property
    def running(self) -> bool:
        return self.resend_timer > 0

    def arm(self, seconds: int = DEFAULT_RESEND_SECONDS) -> None:
        """Start the cooldown. Callers check can_resend before re-arming."""
        if seconds < 0:
            raise ValueError(f"seconds must be >= 0, got {seconds}")
        self.resend_timer = seconds

    def tick(self) -> bool:
        """
        Advance by one second.

        Returns:
            True if the timer was running and decremented, False otherwise
        """
        if not self.running:
            return False
        self.resend_timer -= 1
        return True

    def cancel(self) -> None:
        """Stop the cooldown so a resend is allowed immediately."""
        self.resend_timer = 0
