"""
Tests for notefilter/config.py configuration management.

Tests the hierarchical configuration system with sensible defaults,
including file loading, environment variables, and parser settings.
"""
import os
import pytest
from pathlib import Path
from unittest.mock import patch

import tomli

from notefilter import config as config_module
from notefilter.config import FilterConfig, get_config, init_config
from notefilter.query.dates import DateField, day_first, month_first


class TestFilterConfigDefaults:
    """Test default configuration values."""

    def test_default_date_field_is_modified(self):
        assert FilterConfig().default_date_field == "modified"

    def test_default_date_order_is_auto(self):
        assert FilterConfig().date_order == "auto"

    def test_default_output_format_is_table(self):
        assert FilterConfig().output_format == "table"

    def test_default_color_output_is_true(self):
        assert FilterConfig().color_output is True


class TestConfigLoading:
    """Test configuration loading from files."""

    def test_load_defaults_when_no_files_exist(self, isolated_home):
        config = FilterConfig.load()
        assert config == FilterConfig()

    def test_load_from_local_toml(self, isolated_home):
        Path(isolated_home, "notefilter.toml").write_text('date_order = "mdy"\nlocale = "en_US"\n')

        config = FilterConfig.load()
        assert config.date_order == "mdy"
        assert config.locale == "en_US"

    def test_load_from_rc_file(self, isolated_home):
        Path(isolated_home, ".notefilterrc").write_text('output_format = "json"\n')

        config = FilterConfig.load()
        assert config.output_format == "json"

    def test_load_from_user_config(self, isolated_home):
        user_dir = Path(os.environ["HOME"]) / ".config" / "notefilter"
        user_dir.mkdir(parents=True)
        (user_dir / "config.toml").write_text('default_date_field = "created"\n')

        config = FilterConfig.load()
        assert config.default_date_field == "created"

    def test_local_overrides_user(self, isolated_home):
        user_dir = Path(os.environ["HOME"]) / ".config" / "notefilter"
        user_dir.mkdir(parents=True)
        (user_dir / "config.toml").write_text('date_order = "dmy"\ncolor_output = false\n')
        Path(isolated_home, "notefilter.toml").write_text('date_order = "mdy"\n')

        config = FilterConfig.load()
        assert config.date_order == "mdy"
        assert config.color_output is False

    def test_explicit_file_overrides_local(self, isolated_home):
        Path(isolated_home, "notefilter.toml").write_text('date_order = "mdy"\n')
        explicit = Path(isolated_home, "custom.toml")
        explicit.write_text('date_order = "dmy"\n')

        config = FilterConfig.load(explicit)
        assert config.date_order == "dmy"

    def test_unknown_keys_ignored(self, isolated_home):
        Path(isolated_home, "notefilter.toml").write_text('not_a_setting = 1\n')

        config = FilterConfig.load()
        assert not hasattr(config, "not_a_setting")


class TestEnvironmentVariables:
    """Test NOTEFILTER_* environment overrides."""

    def test_env_overrides_files(self, isolated_home, monkeypatch):
        Path(isolated_home, "notefilter.toml").write_text('date_order = "mdy"\n')
        monkeypatch.setenv("NOTEFILTER_DATE_ORDER", "dmy")

        config = FilterConfig.load()
        assert config.date_order == "dmy"

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("1", True), ("yes", True), ("false", False), ("0", False),
    ])
    def test_env_bool(self, isolated_home, monkeypatch, value, expected):
        monkeypatch.setenv("NOTEFILTER_COLOR_OUTPUT", value)

        assert FilterConfig.load().color_output is expected

    def test_unrelated_env_ignored(self, isolated_home, monkeypatch):
        monkeypatch.setenv("NOTEFILTER_UNKNOWN", "x")
        monkeypatch.setenv("OTHER_DATE_ORDER", "mdy")

        assert FilterConfig.load().date_order == "auto"


class TestParserSettings:
    """Test conversion of settings into parser options."""

    def test_date_field(self):
        assert FilterConfig().date_field() == DateField.MODIFIED
        assert FilterConfig(default_date_field="created").date_field() == DateField.CREATED

    def test_invalid_date_field(self):
        with pytest.raises(ValueError):
            FilterConfig(default_date_field="accessed").date_field()

    def test_explicit_day_orders(self):
        assert FilterConfig(date_order="dmy").day_order() is day_first
        assert FilterConfig(date_order="MDY").day_order() is month_first

    def test_auto_uses_locale(self):
        assert FilterConfig(locale="en_US").day_order() is month_first
        assert FilterConfig(locale="en_GB").day_order() is day_first

    def test_explicit_order_ignores_locale(self):
        assert FilterConfig(date_order="dmy", locale="en_US").day_order() is day_first

    def test_invalid_day_order(self):
        with pytest.raises(ValueError):
            FilterConfig(date_order="ymd").day_order()


class TestSave:
    """Test saving configuration."""

    def test_save_round_trips(self, isolated_home):
        path = Path(isolated_home, "saved", "config.toml")
        FilterConfig(date_order="mdy", color_output=False).save(path)

        with open(path, "rb") as f:
            data = tomli.load(f)
        assert data["date_order"] == "mdy"
        assert data["color_output"] is False

        assert FilterConfig.load(path).date_order == "mdy"

    def test_save_defaults_to_user_config(self, isolated_home):
        FilterConfig().save()

        assert (Path(os.environ["HOME"]) / ".config" / "notefilter" / "config.toml").exists()


class TestGlobalConfig:
    """Test the process-wide configuration instance."""

    @pytest.fixture(autouse=True)
    def reset_global(self):
        with patch.object(config_module, "_config", None):
            yield

    def test_get_config_caches(self, isolated_home):
        assert get_config() is get_config()

    def test_get_config_reload(self, isolated_home):
        first = get_config()
        assert get_config(reload=True) is not first

    def test_init_config_overrides(self, isolated_home):
        config = init_config(output_format="json", log_level=None)
        assert config.output_format == "json"
        assert config.log_level == "WARNING"

    def test_init_config_ignores_unknown(self, isolated_home):
        config = init_config(database="x.db")
        assert not hasattr(config, "database")
