from __future__ import annotations

"""
Snapshot Settings Domain.

Handles the dict-based settings that parameterize a snapshot build: the
legacy script emission mode, ignore globs and the directory they are anchored
to, plus the logging level and file. Provides defaults, validation with type
coercion, and translation into an InstanceContext and a LoggingConfig.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from treesync.core.components.ignore_rules import rules_from_globs
from treesync.domain.snapshot_models import EmitLegacyScripts, InstanceContext
from treesync.infra.logging import LoggingConfig

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# DEFAULTS
# -----------------------------------------------------------------------------

def get_default_settings() -> Dict[str, Any]:
    """
    Generate the default snapshot settings.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        "project_root": os.getcwd(),
        "emit_legacy_scripts": None,
        "glob_ignore_paths": [],
        "log_level": "WARNING",
        "log_file": None,
    }

# -----------------------------------------------------------------------------
# VALIDATION
# -----------------------------------------------------------------------------

def validate_settings(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a raw settings dictionary.

    Args:
        config: Raw settings (usually parsed from a project file).
        strict: If True, raise on type mismatch instead of falling back.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized settings and warnings.
    """
    warnings: List[str] = []
    defaults = get_default_settings()

    if not isinstance(config, dict):
        msg = f"Invalid settings type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    merged["project_root"] = _as_str(
        merged.get("project_root"), defaults["project_root"], "project_root", warnings, strict
    )
    merged["emit_legacy_scripts"] = _as_optional_bool(
        merged.get("emit_legacy_scripts"), "emit_legacy_scripts", warnings, strict
    )
    merged["glob_ignore_paths"] = _as_list_str(
        merged.get("glob_ignore_paths"), [], "glob_ignore_paths", warnings, strict
    )
    merged["log_level"] = _as_str(
        merged.get("log_level"), defaults["log_level"], "log_level", warnings, strict
    ).upper()
    merged["log_file"] = _as_str(merged.get("log_file"), "", "log_file", warnings, strict) or None

    return merged, warnings


def build_instance_context(settings: Dict[str, Any]) -> InstanceContext:
    """
    Translate validated settings into a traversal context.

    Ignore globs are anchored at the project root.

    Args:
        settings: Output of validate_settings.

    Returns:
        InstanceContext: Immutable context for the build.
    """
    context = InstanceContext.with_emit_legacy_scripts(
        EmitLegacyScripts.from_optional_bool(settings.get("emit_legacy_scripts"))
    )
    rules = rules_from_globs(settings.get("glob_ignore_paths", []), settings["project_root"])
    if rules:
        logger.debug(f"Settings: {len(rules)} ignore rule(s) anchored at {settings['project_root']}")
    return context.add_path_ignore_rules(rules)


def build_logging_config(settings: Dict[str, Any]) -> LoggingConfig:
    """Translate validated settings into logging settings."""
    return LoggingConfig(
        level=settings.get("log_level", "WARNING"),
        log_file=settings.get("log_file"),
    )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_optional_bool(value: Any, field: str, warnings: List[str], strict: bool) -> Optional[bool]:
    """Accept None or a real boolean; anything else becomes None."""
    if value is None or isinstance(value, bool):
        return value

    msg = f"Invalid field '{field}': expected bool or null, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Treating as unset.")
    return None


def _as_list_str(
        value: Any,
        fallback: List[str],
        field: str,
        warnings: List[str],
        strict: bool,
) -> List[str]:
    """Validate a list of strings, dropping non-string items."""
    if value is None:
        return list(fallback)
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        out = [v for v in value if isinstance(v, str)]
        if len(out) != len(value):
            msg = f"Invalid items in '{field}': non-string entries removed."
            if strict:
                raise TypeError(msg)
            warnings.append(msg)
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)
