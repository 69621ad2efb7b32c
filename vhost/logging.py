"""
Logging for nginx-vhost.

Example:
    from vhost.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Writing server block")
    logger.debug("$ systemctl is-active nginx.service")
"""

import logging
from typing import Iterable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.theme import Theme

VHOST_THEME = Theme({
    "log.time": "dim cyan",
    "log.level.debug": "dim blue",
    "log.level.info": "green",
    "log.level.warning": "yellow",
    "log.level.error": "bold red",
    "log.level.critical": "bold white on red",
    "vhost.success": "bold green",
    "vhost.failed": "bold red",
    "vhost.skipped": "yellow",
    "vhost.banner": "bold cyan",
    "vhost.hint": "cyan",
})

# Progress lines are padded with dots up to this column
STEP_WIDTH = 80

console = Console(theme=VHOST_THEME, stderr=True)

_initialized = False


def setup_logging(
    level: str = "INFO",
    show_time: bool = True,
    show_path: bool = False,
    rich_tracebacks: bool = True,
) -> None:
    """
    Initialize logging for the tool.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        show_time: Show timestamps in log output
        show_path: Show file path in log output
        rich_tracebacks: Use rich formatting for tracebacks

    Note:
        Subsequent calls are ignored to prevent duplicate handlers.
        Call reset_logging() first to reconfigure.
    """
    global _initialized

    if _initialized:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logging.basicConfig(
        level=numeric_level,
        handlers=[handler],
        force=True,
    )

    _initialized = True


def reset_logging() -> None:
    """Allow setup_logging() to run again (the CLI uses this to apply --log-level)."""
    global _initialized
    _initialized = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a given module.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


class VhostLogger:
    """
    Console reporter for provisioning runs.

    Wraps a standard logger and adds the dotted progress lines,
    boxed errors and hint lists shown to the operator.
    """

    def __init__(self, name: str, out: Optional[Console] = None):
        self.logger = get_logger(name)
        self.console = out or console

    def debug(self, message: str, *args) -> None:
        self.logger.debug(message, *args)

    def info(self, message: str, *args) -> None:
        self.logger.info(message, *args)

    def warning(self, message: str, *args) -> None:
        self.logger.warning(message, *args)

    def error(self, message: str, *args) -> None:
        self.logger.error(message, *args)

    def banner(self, text: str) -> None:
        """Print a framed heading line."""
        rule = "|" + "-" * 59
        self.console.print()
        self.console.print(f"[vhost.banner]{rule}[/vhost.banner]")
        self.console.print(f"[vhost.banner]| {escape(text)}[/vhost.banner]")
        self.console.print(f"[vhost.banner]{rule}[/vhost.banner]")
        self.console.print()

    def step(self, label: str) -> None:
        """
        Start a progress line: the label padded with dots.

        The line is completed by done(), failed() or skipped().
        """
        dots = "." * max(STEP_WIDTH - len(label), 3)
        self.console.print(f"{escape(label)} [dim]{dots}[/dim] ", end="")

    def done(self, text: str = "Done.") -> None:
        self.console.print(f"[vhost.success]{escape(text)}[/vhost.success]")

    def failed(self, text: str = "failed !") -> None:
        self.console.print(f"[vhost.failed]{escape(text)}[/vhost.failed]")

    def skipped(self, text: str) -> None:
        self.console.print(f"[vhost.skipped]{escape(text)}[/vhost.skipped]")

    def success(self, message: str) -> None:
        self.console.print(f"[vhost.success]✓[/vhost.success] {escape(message)}")

    def error_box(self, message: str, title: str = "ERROR") -> None:
        """Print a highlighted error panel."""
        self.console.print()
        self.console.print(
            Panel(escape(message), title=title, border_style="vhost.failed", expand=False)
        )

    def hints(self, title: str, lines: Iterable[str]) -> None:
        """
        Print a titled block of copy-pasteable lines.

        Args:
            title: Heading for the block
            lines: Commands or remarks, printed verbatim
        """
        self.console.print()
        self.console.print(f"* {escape(title)}")
        self.console.print()
        for line in lines:
            self.console.print(f"  [vhost.hint]{escape(line)}[/vhost.hint]")
        self.console.print()


def get_vhost_logger(name: str) -> VhostLogger:
    """
    Get a VhostLogger instance for the given module.

    Example:
        logger = get_vhost_logger(__name__)
        logger.step("Restarting nginx service")
        logger.done()
    """
    return VhostLogger(name)
