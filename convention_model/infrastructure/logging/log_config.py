"""Centralized logging configuration.

Applies per-category log levels from Settings so that one phase of the
build pipeline can be made verbose without flooding the others.

Usage:
    from convention_model.infrastructure.logging.log_config import setup_logging
    setup_logging()   # Call once at startup
"""

import logging
import sys

from convention_model.config import Settings, get_settings


# ── Logger-name → Settings-field mapping ────────────────────────────
#
# Each entry maps one or more Python logger names to a Settings field.
# When setup_logging() runs, it sets the level of each listed logger
# to the value of the corresponding setting.

_CATEGORY_MAP: dict[str, list[str]] = {
    "log_level_classification": [
        "convention_model.application.services.classification_engine",
        "ClassificationEngine",
    ],
    "log_level_inheritance": [
        "convention_model.application.services.inheritance_resolver",
        "InheritanceResolver",
    ],
    "log_level_conventions": [
        "convention_model.application.services.convention_engine",
        "ConventionEngine",
    ],
    "log_level_binding": [
        "convention_model.application.services.navigation_binding_resolver",
        "NavigationBindingResolver",
    ],
    "log_level_pruning": [
        "convention_model.application.services.pruner",
        "Pruner",
    ],
    "log_level_metadata": [
        "convention_model.infrastructure.metadata",
    ],
}


def setup_logging(settings: Settings | None = None) -> None:
    """Configure Python logging levels from builder settings."""
    settings = settings or get_settings()
    root_level = _parse_level(settings.log_level)

    # ── Root logger ────────────────────────────────────────────────
    root = logging.getLogger()
    root.setLevel(root_level)

    # Scripts and test runs may start without any handler
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(levelname)-8s %(name)s - %(message)s",
            )
        )
        root.addHandler(handler)

    # ── Per-category loggers ───────────────────────────────────────
    for settings_field, logger_names in _CATEGORY_MAP.items():
        raw_level: str = getattr(settings, settings_field, "INFO")
        level = _parse_level(raw_level)

        for name in logger_names:
            logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s, classification=%s, inheritance=%s, "
        "conventions=%s, binding=%s, pruning=%s, metadata=%s",
        settings.log_level,
        settings.log_level_classification,
        settings.log_level_inheritance,
        settings.log_level_conventions,
        settings.log_level_binding,
        settings.log_level_pruning,
        settings.log_level_metadata,
    )


def _parse_level(raw: str) -> int:
    """Convert a level name string to a logging constant, defaulting to INFO."""
    numeric = getattr(logging, raw.upper(), None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO
