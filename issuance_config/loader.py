"""
Configuration Loader (``issuance_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen types of
``issuance_config.schema``.  Runtime callers go through
``issuance_config.get_active_config()``, not through this module.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from issuance_config.schema import (
    ApiConfig,
    EditorConfig,
    IssuanceConfig,
    NoteAuthorDefaults,
    RoleRequirement,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_api(data: dict[str, Any]) -> ApiConfig:
    return ApiConfig(
        base_url=str(data["base_url"]).rstrip("/"),
        timeout_seconds=float(data.get("timeout_seconds", 15.0)),
    )


def parse_editor(data: dict[str, Any]) -> EditorConfig:
    authors = data.get("note_authors", {}) or {}
    defaults = NoteAuthorDefaults()
    return EditorConfig(
        business_timezone=data.get("business_timezone", "UTC"),
        clamp_mif_to_stock=bool(data.get("clamp_mif_to_stock", True)),
        note_authors=NoteAuthorDefaults(
            note=authors.get("note", defaults.note),
            head_note=authors.get("head_note", defaults.head_note),
            mif_note=authors.get("mif_note", defaults.mif_note),
        ),
    )


def parse_role_requirement(data: dict[str, Any]) -> RoleRequirement:
    return RoleRequirement(
        role=data["role"],
        vendor_fields=tuple(data.get("vendor_fields", ()) or ()),
    )


def parse_config(data: dict[str, Any]) -> IssuanceConfig:
    """
    Parse an ``IssuanceConfig`` from a dict.

    Raises:
        KeyError: if ``config_id``, ``version`` or ``api.base_url`` is missing.
    """
    return IssuanceConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        api=parse_api(data["api"]),
        editor=parse_editor(data.get("editor", {}) or {}),
        role_requirements=tuple(
            parse_role_requirement(r) for r in data.get("role_requirements", []) or []
        ),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
