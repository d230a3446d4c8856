"""Tests for settings loading."""

import json

import pytest
import yaml

from fieldknobs import ConfigurationError, Settings, ValidationSession
from fieldknobs.settings import DEFAULT_TIMESTAMP_LAYOUTS, RFC3339, SETTINGS_ENV_VAR


class TestSettings:
    """Test Settings construction."""

    def test_defaults(self):
        """Test default layouts and messages."""
        settings = Settings()
        assert settings.timestamp_layouts == DEFAULT_TIMESTAMP_LAYOUTS
        assert settings.timestamp_layouts[0] == RFC3339
        assert len(settings.timestamp_layouts) == 9
        assert dict(settings.messages) == {}
        assert settings.message_for("min") is None

    def test_layouts_normalized_to_tuple(self):
        """Test list layouts become a tuple."""
        settings = Settings(timestamp_layouts=["%Y"])
        assert settings.timestamp_layouts == ("%Y",)

    def test_empty_layouts_rejected(self):
        """Test that at least one layout is required."""
        with pytest.raises(ConfigurationError):
            Settings(timestamp_layouts=())

    def test_messages_read_only(self):
        """Test messages cannot be changed after construction."""
        settings = Settings(messages={"min": "x"})
        with pytest.raises(TypeError):
            settings.messages["min"] = "y"

    def test_from_dict(self):
        """Test loading from a dictionary."""
        settings = Settings.from_dict(
            {"timestamp_layouts": ["rfc3339", "%d.%m.%Y"], "messages": {"required": "{field}!"}}
        )
        assert settings.timestamp_layouts == ("rfc3339", "%d.%m.%Y")
        assert settings.message_for("required") == "{field}!"

    def test_from_dict_empty(self):
        """Test empty and missing dictionaries give defaults."""
        assert Settings.from_dict({}) == Settings()
        assert Settings.from_dict(None).timestamp_layouts == DEFAULT_TIMESTAMP_LAYOUTS

    def test_from_dict_unknown_key(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_dict({"layouts": []})
        assert exc_info.value.context["unknown"] == ["layouts"]

    @pytest.mark.parametrize(
        "data",
        [
            {"timestamp_layouts": "%Y-%m-%d"},
            {"timestamp_layouts": [1, 2]},
            {"messages": ["required"]},
            {"messages": {"min": 5}},
        ],
    )
    def test_from_dict_bad_values(self, data):
        """Test malformed values are rejected."""
        with pytest.raises(ConfigurationError):
            Settings.from_dict(data)

    def test_to_dict(self):
        """Test export round-trips through from_dict."""
        settings = Settings(messages={"min": "small"})
        assert Settings.from_dict(settings.to_dict()) == settings


class TestSettingsFiles:
    """Test loading settings from files."""

    def test_from_yaml(self, tmp_path):
        """Test YAML settings files."""
        path = tmp_path / "fieldknobs.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "timestamp_layouts": ["%d.%m.%Y"],
                    "messages": {"min": "{field} too small (min {min})"},
                }
            )
        )

        settings = Settings.from_file(path)
        assert settings.timestamp_layouts == ("%d.%m.%Y",)

        session = ValidationSession(settings)
        session.chain("day", "31.12.2020").min_date("01.01.2021")
        session.chain("age", 3).min(18)

        assert session.error_for("day").tag == "min_date"
        assert session.error_for("age").message == "age too small (min 18)"

    def test_from_json(self, tmp_path):
        """Test JSON settings files."""
        path = tmp_path / "fieldknobs.json"
        path.write_text(json.dumps({"messages": {"required": "missing"}}))

        assert Settings.from_file(path).message_for("required") == "missing"

    def test_empty_yaml(self, tmp_path):
        """Test an empty YAML file gives defaults."""
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert Settings.from_file(path) == Settings()

    def test_missing_file(self, tmp_path):
        """Test missing files."""
        with pytest.raises(ConfigurationError, match="not found"):
            Settings.from_file(tmp_path / "nope.yaml")

    def test_unsupported_suffix(self, tmp_path):
        """Test unknown file formats."""
        path = tmp_path / "settings.toml"
        path.write_text("")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            Settings.from_file(path)

    def test_invalid_yaml(self, tmp_path):
        """Test unparseable YAML."""
        path = tmp_path / "bad.yaml"
        path.write_text("messages: [unclosed")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            Settings.from_file(path)

    def test_non_mapping(self, tmp_path):
        """Test files that do not contain a mapping."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            Settings.from_file(path)


class TestSettingsFromEnv:
    """Test loading settings named by the environment."""

    def test_unset(self, monkeypatch):
        """Test defaults when the variable is unset."""
        monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
        assert Settings.from_env() == Settings()

    def test_set(self, monkeypatch, tmp_path):
        """Test loading the named file."""
        path = tmp_path / "env.yaml"
        path.write_text("messages:\n  required: '{field} please'\n")
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))

        assert Settings.from_env().message_for("required") == "{field} please"
