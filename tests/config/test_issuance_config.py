"""
Tests for configuration loading, validation and the single entrypoint.
"""

import logging
from pathlib import Path

import pytest
import yaml

from issuance_config import get_active_config
from issuance_config.loader import compute_checksum, parse_config
from issuance_config.schema import ApiConfig, IssuanceConfig, RoleRequirement
from issuance_config.validator import validate_configuration
from issuance_kernel.exceptions import ConfigValidationError

VALID = {
    "config_id": "site",
    "version": 2,
    "api": {"base_url": "https://erp.example/api/", "timeout_seconds": 5},
    "editor": {"business_timezone": "Asia/Kolkata", "clamp_mif_to_stock": False},
    "role_requirements": [
        {"role": "purchase_head", "vendor_fields": ["vendor_name"]},
    ],
}


def write_set(directory: Path, name: str, data: dict) -> None:
    (directory / f"{name}.yaml").write_text(yaml.safe_dump(data))


class TestDefaultSet:
    def test_default_set_loads(self):
        config = get_active_config()
        assert config.config_id == "default"
        assert config.api.timeout_seconds == 15
        assert config.editor.note_authors.head_note == "Previous User"
        assert config.required_vendor_fields("CEO") == (
            "vendor_name", "vendor_link", "approx_price",
        )

    def test_unknown_role_requires_nothing(self):
        assert get_active_config().required_vendor_fields("store_keeper") == ()
        assert get_active_config().required_vendor_fields(None) == ()

    def test_emits_config_trace(self, caplog):
        with caplog.at_level(logging.INFO, logger="issuance_kernel.config"):
            config = get_active_config()
        (record,) = [r for r in caplog.records if r.getMessage() == "ISSUANCE_CONFIG_TRACE"]
        assert record.checksum == config.checksum


class TestParseConfig:
    def test_parse(self):
        config = parse_config(VALID)
        assert config.api.base_url == "https://erp.example/api"
        assert config.editor.clamp_mif_to_stock is False
        assert config.editor.note_authors.note == "Unknown"
        assert config.role_requirements == (RoleRequirement("purchase_head", ("vendor_name",)),)

    def test_checksum_stable_across_key_order(self):
        reordered = dict(reversed(list(VALID.items())))
        assert compute_checksum(VALID) == compute_checksum(reordered)

    def test_missing_api_raises(self):
        with pytest.raises(KeyError):
            parse_config({"config_id": "x", "version": 1})


class TestValidateConfiguration:
    def _config(self, **overrides) -> IssuanceConfig:
        config = parse_config(VALID)
        fields = {
            "config_id": config.config_id,
            "version": config.version,
            "api": config.api,
            "editor": config.editor,
            "role_requirements": config.role_requirements,
        }
        fields.update(overrides)
        return IssuanceConfig(**fields)

    def test_valid(self):
        assert validate_configuration(self._config()).is_valid

    def test_bad_url_and_timeout(self):
        result = validate_configuration(self._config(api=ApiConfig("erp.local", 0)))
        assert len(result.errors) == 2

    def test_unknown_vendor_field(self):
        config = self._config(role_requirements=(RoleRequirement("ceo", ("colour",)),))
        (error,) = validate_configuration(config).errors
        assert "colour" in error

    def test_duplicate_role(self):
        config = self._config(role_requirements=(
            RoleRequirement("ceo", ("vendor_name",)),
            RoleRequirement("CEO", ("vendor_link",)),
        ))
        assert not validate_configuration(config).is_valid

    def test_empty_field_list_warns(self):
        config = self._config(role_requirements=(RoleRequirement("ceo", ()),))
        result = validate_configuration(config)
        assert result.is_valid
        assert result.warnings


class TestGetActiveConfig:
    def test_custom_directory(self, tmp_path):
        write_set(tmp_path, "site", VALID)
        assert get_active_config("site", tmp_path).version == 2

    def test_missing_set(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config("absent", tmp_path)

    def test_invalid_set_raises(self, tmp_path):
        bad = dict(VALID, editor={"business_timezone": "Mars/Olympus"})
        write_set(tmp_path, "bad", bad)
        with pytest.raises(ConfigValidationError) as exc_info:
            get_active_config("bad", tmp_path)
        assert exc_info.value.config_name == "site"
