"""CLI error type shown to kitectl users."""

import click

from kitectl.domain.exceptions import KiteError


class KitectlCliError(click.ClickException):
    """click error that prints a follow-up hint under the message.

    Example:
        raise KitectlCliError(
            "Kite was started but is not reachable",
            hint="Check 'kitectl status' in a moment",
        )
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    @classmethod
    def from_kite_error(cls, error: KiteError) -> "KitectlCliError":
        """Wrap a lifecycle error raised by install or launch, keeping its hint."""
        return cls(error.message, hint=error.hint)

    def format_message(self) -> str:
        if not self.hint:
            return self.message
        return f"{self.message}\nHint: {self.hint}"
