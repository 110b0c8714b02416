"""Progress display for long-running lifecycle actions."""

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager

from rich.progress import Progress, SpinnerColumn, TextColumn

logger = logging.getLogger(__name__)


@contextmanager
def spinner(
    description: str, quiet: bool = False
) -> Generator[Callable[[str], None], None, None]:
    """Show a transient spinner while an action runs.

    Args:
        description: Initial spinner text
        quiet: If True, show nothing

    Yields:
        Callback that updates the spinner text (e.g., for install steps)

    Example:
        with spinner("Installing Kite...") as update:
            orchestrator.install(InstallOptions(on_step=update))
    """
    if quiet:
        yield lambda step: logger.debug(step)
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)

        def update(step: str) -> None:
            logger.debug(step)
            progress.update(task, description=f"{step}...")

        yield update
