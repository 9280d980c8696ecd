"""Colored sync logger for tracing the replay of queued writes in the terminal.

Color scheme:
    🟡 yellow   replay of one operation
    🟢 green    operation accepted by the server
    🟣 magenta  operation rejected, kept for a later drain
    🔴 red      drain interrupted (server unreachable)
    ⚪ gray     details and stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    MAGENTA = "\033[95m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


class SyncStage:
    """Stages of one queue drain, as (label, color, icon)."""

    REPLAY = ("REPLAY", _Colors.YELLOW, "📤")
    ACCEPTED = ("ACCEPTED", _Colors.GREEN, "✅")
    REJECTED = ("REJECTED", _Colors.MAGENTA, "↩️")
    SKIPPED = ("SKIPPED", _Colors.GRAY, "⏭️")
    INTERRUPTED = ("INTERRUPTED", _Colors.RED, "📴")
    SYNC = ("SYNC", _Colors.WHITE, "🔄")


class SyncLogger:
    """Color-coded logger for the pending-operation replay.

    Usage:
        log = SyncLogger()
        log.step_start(SyncStage.REPLAY, "PUT /api/jobs/7", op_id=3)
        log.step_complete(SyncStage.ACCEPTED, "200 OK")
    """

    def __init__(self, component_name: str = "SyncPipeline"):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _details(kwargs))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _details(kwargs))

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a recoverable problem; the drain carries on."""
        label, color, icon = stage
        formatted = f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} {color}{message}{_Colors.RESET}"
        self._logger.warning(formatted + _details(kwargs))

    def step_error(
        self, stage: tuple[str, str, str], message: str, error: Exception | None = None
    ) -> None:
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def stats(self, **kwargs: Any) -> None:
        parts = " | ".join(f"{k}: {v}" for k, v in kwargs.items())
        self._logger.info(f"   {_Colors.GRAY}📈 {parts}{_Colors.RESET}")

    @contextmanager
    def timed_drain(self, message: str, **kwargs: Any):
        """Wrap a whole drain, logging its start, end and elapsed time."""
        self.step_start(SyncStage.SYNC, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.step_error(
                SyncStage.SYNC, f"{message} failed after {time.perf_counter() - start:.2f}s", error=e
            )
            raise
        else:
            self.step_complete(SyncStage.SYNC, f"{message} in {time.perf_counter() - start:.2f}s")


def _details(kwargs: dict[str, Any]) -> str:
    if not kwargs:
        return ""
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {_Colors.GRAY}({details}){_Colors.RESET}"
