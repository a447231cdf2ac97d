"""
Configuration Validator (``issuance_config.validator``).

Checks a parsed ``IssuanceConfig`` before it is handed to the editor.

Invariants enforced
-------------------
* The API base URL is an http(s) URL and the timeout is positive.
* The business time zone is a known IANA zone.
* Role requirements name each role once and only real vendor fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from issuance_config.schema import VENDOR_FIELDS, IssuanceConfig


@dataclass
class ConfigValidationResult:
    """``is_valid`` is True only when ``errors`` is empty."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: IssuanceConfig) -> ConfigValidationResult:
    result = ConfigValidationResult()

    parsed = urlparse(config.api.base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        result.add_error(f"api.base_url is not an http(s) URL: {config.api.base_url!r}")
    if config.api.timeout_seconds <= 0:
        result.add_error("api.timeout_seconds must be positive")

    try:
        ZoneInfo(config.editor.business_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        result.add_error(
            f"editor.business_timezone is not a known zone: "
            f"{config.editor.business_timezone!r}"
        )

    seen: set[str] = set()
    for requirement in config.role_requirements:
        role = requirement.role.strip().lower()
        if not role:
            result.add_error("role_requirements entry with an empty role")
            continue
        if role in seen:
            result.add_error(f"role_requirements lists role {requirement.role!r} twice")
        seen.add(role)
        for name in requirement.vendor_fields:
            if name not in VENDOR_FIELDS:
                result.add_error(
                    f"role {requirement.role!r} requires unknown vendor field {name!r}"
                )
        if not requirement.vendor_fields:
            result.add_warning(f"role {requirement.role!r} requires no vendor fields")

    return result
