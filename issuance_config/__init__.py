"""
issuance_config -- single public entrypoint for editor configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a validated, frozen
    ``IssuanceConfig``.  YAML loading is internal tooling.

Architecture position:
    Configuration -- sits above ``issuance_kernel`` and below
    ``issuance_services``.  The kernel and engines MUST NEVER import from
    ``issuance_config``.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with the given name.
    - ``ConfigValidationError`` -- structural validation failed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from issuance_config.loader import load_yaml_file, parse_config
from issuance_config.schema import (
    ApiConfig,
    EditorConfig,
    IssuanceConfig,
    NoteAuthorDefaults,
    RoleRequirement,
)
from issuance_config.validator import validate_configuration
from issuance_kernel.exceptions import ConfigValidationError

_logger = logging.getLogger("issuance_kernel.config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(
    name: str = "default",
    config_dir: Path | None = None,
) -> IssuanceConfig:
    """The ONLY public configuration entrypoint.

    Args:
        name: Configuration set name (``sets/<name>.yaml``).
        config_dir: Override path to the configuration sets directory.

    Raises:
        FileNotFoundError: If the configuration set does not exist.
        ConfigValidationError: If validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Configuration set not found: {path}")

    config = parse_config(load_yaml_file(path))

    validation = validate_configuration(config)
    for warning in validation.warnings:
        _logger.warning("config_warning", extra={"config_id": config.config_id, "detail": warning})
    if not validation.is_valid:
        raise ConfigValidationError(config.config_id, validation.errors)

    _logger.info(
        "ISSUANCE_CONFIG_TRACE",
        extra={
            "trace_type": "ISSUANCE_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "role_requirement_count": len(config.role_requirements),
        },
    )
    return config


__all__ = [
    "ApiConfig",
    "EditorConfig",
    "IssuanceConfig",
    "NoteAuthorDefaults",
    "RoleRequirement",
    "get_active_config",
]
