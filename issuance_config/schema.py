"""
Editor configuration schema.

Defines the human-authored, reviewable configuration for the request line
editor and its API client.  YAML files under ``sets/`` are parsed into
these frozen types by the loader and checked by the validator.
"""

from __future__ import annotations

from dataclasses import dataclass, field

VENDOR_FIELDS: frozenset[str] = frozenset({
    "vendor_name",
    "vendor_link",
    "approx_price",
    "expected_delivery_date",
    "certificate_desired",
})


@dataclass(frozen=True)
class ApiConfig:
    """Where the backend lives and how long to wait for it."""

    base_url: str
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class NoteAuthorDefaults:
    """Author names assumed for server notes that carry none."""

    note: str = "Unknown"
    head_note: str = "Previous User"
    mif_note: str = "Inventory Head"


@dataclass(frozen=True)
class EditorConfig:
    """Behaviour switches for ``RequestLineEditor``."""

    business_timezone: str = "UTC"
    clamp_mif_to_stock: bool = True
    note_authors: NoteAuthorDefaults = field(default_factory=NoteAuthorDefaults)


@dataclass(frozen=True)
class RoleRequirement:
    """Vendor fields a role must fill in before saving vendor details."""

    role: str
    vendor_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class IssuanceConfig:
    """A complete, validated configuration set."""

    config_id: str
    version: int
    api: ApiConfig
    editor: EditorConfig = field(default_factory=EditorConfig)
    role_requirements: tuple[RoleRequirement, ...] = ()
    checksum: str = ""

    def required_vendor_fields(self, role: str | None) -> tuple[str, ...]:
        """Vendor fields ``role`` must fill in; empty for unknown roles."""
        if role is None:
            return ()
        wanted = role.strip().lower()
        for requirement in self.role_requirements:
            if requirement.role.strip().lower() == wanted:
                return requirement.vendor_fields
        return ()
