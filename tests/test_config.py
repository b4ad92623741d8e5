"""Tests for transform configuration loading."""

import json

import pytest
from pydantic import ValidationError

from analyticdefs.config import DEFAULT_CONFIG, TransformConfig, load_config
from analyticdefs.errors import ConfigError


class TestDefaults:
    def test_wire_conventions(self):
        assert DEFAULT_CONFIG.ignored_discriminators == frozenset({"workbook", "dataSet", "formula"})
        assert DEFAULT_CONFIG.discriminated_keys == frozenset({"formula"})
        assert DEFAULT_CONFIG.translation_prefix == "custcollectiontranslations"
        assert DEFAULT_CONFIG.pretty_xml is True

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_CONFIG.pretty_xml = False

    def test_unknown_setting_rejected(self):
        with pytest.raises(ValidationError):
            TransformConfig(colour="blue")


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "ignored_discriminators": ["workbook", "dataSet"],
            "pretty_xml": False,
        }), encoding="utf-8")

        config = load_config(path)
        assert config.ignored_discriminators == frozenset({"workbook", "dataSet"})
        assert config.pretty_xml is False
        assert config.discriminated_keys == DEFAULT_CONFIG.discriminated_keys

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_setting(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"xml_indent": 4, "unknown": True}), encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)
