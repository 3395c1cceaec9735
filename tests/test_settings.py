"""Tests for npk_deploy.config.settings: loading and allow-list validation."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from npk_deploy.config.models import ALLOWED_SETTINGS, Settings
from npk_deploy.config.settings import (
    find_invalid_keys,
    load_settings,
    validate_settings,
)
from npk_deploy.errors import InvalidSettings, SettingsFileError

SAMPLE_SETTINGS = Path(__file__).resolve().parent.parent / "npk-settings.json.sample"


# ---------------------------------------------------------------------------
# load_settings
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_reads_json_object(self, tmp_path):
        path = tmp_path / "npk-settings.json"
        path.write_text(json.dumps({"awsProfile": "npk", "campaign_data_ttl": 604800}))
        assert load_settings(path) == {"awsProfile": "npk", "campaign_data_ttl": 604800}

    def test_missing_file(self, tmp_path):
        with pytest.raises(SettingsFileError, match="Unable to open"):
            load_settings(tmp_path / "absent.json")

    def test_unparsable(self, tmp_path):
        path = tmp_path / "npk-settings.json"
        path.write_text('{"awsProfile": [unterminated')
        with pytest.raises(SettingsFileError, match="Unable to parse"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "npk-settings.json"
        path.write_text(json.dumps(["awsProfile"]))
        with pytest.raises(SettingsFileError, match="JSON object"):
            load_settings(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "npk-settings.json"
        path.write_text("")
        with pytest.raises(SettingsFileError, match="Unable to parse"):
            load_settings(path)

    def test_tab_indented_json(self, tmp_path):
        path = tmp_path / "npk-settings.json"
        path.write_text('{\n\t"awsProfile": "npk",\n\t"georestrictions": []\n}\n')
        assert load_settings(path) == {"awsProfile": "npk", "georestrictions": []}

    def test_shipped_sample_loads_and_validates(self, tmp_path):
        path = tmp_path / "npk-settings.json"
        shutil.copy(SAMPLE_SETTINGS, path)

        raw = load_settings(path)
        settings = validate_settings(raw)

        assert raw["awsProfile"] == "npk"
        assert settings.route53Zone == "Z0123456789ABCDEFGHIJ"


# ---------------------------------------------------------------------------
# find_invalid_keys / validate_settings
# ---------------------------------------------------------------------------


class TestFindInvalidKeys:
    def test_all_allowed(self):
        assert find_invalid_keys({k: None for k in ALLOWED_SETTINGS}) == []

    def test_document_order_preserved(self):
        raw = {"zeta": 1, "awsProfile": "x", "alpha": 2}
        assert find_invalid_keys(raw) == ["zeta", "alpha"]


class TestValidateSettings:
    def test_valid_document(self):
        settings = validate_settings(
            {"awsProfile": "npk", "route53Zone": "Z123", "adminEmail": "a@b.c"}
        )
        assert isinstance(settings, Settings)
        assert settings.route53Zone == "Z123"
        assert settings.awsProfile == "npk"

    def test_empty_document_is_valid(self):
        settings = validate_settings({})
        assert settings.route53Zone is None

    def test_invalid_keys_listed_exactly(self):
        raw = {"awsProfile": "npk", "bogus": 1, "another": 2}
        with pytest.raises(InvalidSettings) as exc_info:
            validate_settings(raw)
        assert exc_info.value.keys == ["bogus", "another"]
        assert "bogus" in str(exc_info.value)
        assert exc_info.value.remediation.endswith("Fix your settings, then try again.")

    def test_legacy_key_adds_upgrade_hint(self):
        with pytest.raises(InvalidSettings) as exc_info:
            validate_settings({"useCustomDNS": True})
        assert exc_info.value.keys == ["useCustomDNS"]
        assert "v2" in exc_info.value.remediation

    def test_unknown_key_has_no_upgrade_hint(self):
        with pytest.raises(InvalidSettings) as exc_info:
            validate_settings({"foo": 1})
        assert "v2" not in exc_info.value.remediation

    def test_bad_value_type(self):
        with pytest.raises(SettingsFileError, match="Invalid setting value"):
            validate_settings({"route53Zone": ["Z1", "Z2"]})

    def test_check_id(self):
        with pytest.raises(InvalidSettings) as exc_info:
            validate_settings({"foo": 1})
        assert exc_info.value.check_id == "settings.keys"


class TestSettingsPassthrough:
    def test_excludes_unset_and_profile(self):
        settings = validate_settings(
            {"awsProfile": "npk", "campaign_max_price": 50, "georestrictions": ["US"]}
        )
        assert settings.passthrough() == {
            "campaign_max_price": 50,
            "georestrictions": ["US"],
        }

    def test_frozen(self):
        settings = validate_settings({"route53Zone": "Z1"})
        with pytest.raises(Exception):
            settings.route53Zone = "Z2"
