"""Colored build logger: ANSI-colored console logging for the schema build pipeline.

Each build phase gets its own color so a verbose build can be followed in
the terminal:

    Blue    CLASSIFY       Magenta  BINDING
    Yellow  INHERITANCE    Gray     PRUNE
    Cyan    CONVENTIONS    Green    FINALIZE
    White   HOOK           Red      errors
    Bold    BUILD (the banner opening a whole build)
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
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Build Stage Definitions ──────────────────────────────────────────

class BuildStage:
    """Pipeline stages of a schema build, as (label, color, icon) triples."""

    BUILD = ("BUILD", _Colors.BOLD, "🏗️")
    CLASSIFY = ("CLASSIFY", _Colors.BLUE, "🏷️")
    INHERITANCE = ("INHERITANCE", _Colors.YELLOW, "🌳")
    CONVENTIONS = ("CONVENTIONS", _Colors.CYAN, "📐")
    HOOK = ("HOOK", _Colors.WHITE, "🪝")
    BINDING = ("BINDING", _Colors.MAGENTA, "🔗")
    PRUNE = ("PRUNE", _Colors.GRAY, "✂️")
    FINALIZE = ("FINALIZE", _Colors.GREEN, "✅")


class BuildLogger:
    """Color-coded logger for one builder component.

    Usage:
        log = BuildLogger("ConventionModelBuilder")
        with log.timed_step(BuildStage.CLASSIFY, "Classifying reachable types"):
            ...
        log.detail("Vehicle -> entity")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    @staticmethod
    def _suffix(kwargs: dict[str, Any]) -> str:
        if not kwargs:
            return ""
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        return f" {_Colors.GRAY}({details}){_Colors.RESET}"

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        self._logger.info(
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}{self._suffix(kwargs)}"
        )

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        self._logger.info(
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}{self._suffix(kwargs)}"
        )

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a failed stage in red."""
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log a per-type detail line at debug level."""
        self._logger.debug(f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}{self._suffix(kwargs)}")

    def stats(self, **kwargs: Any) -> None:
        parts = [f"{k}: {v}" for k, v in kwargs.items()]
        self._logger.info(f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}")

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end of a stage with elapsed time.

        Errors are logged and re-raised unchanged.
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} failed after {elapsed * 1000:.1f}ms", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} ({elapsed * 1000:.1f}ms)")
