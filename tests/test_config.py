"""
Tests for configuration loading and detection settings.
"""

import logging

import pytest
import yaml

from photosweep.config import (
    DEFAULT_CONFIG_PATH,
    DetectionSettings,
    get_config_value,
    get_default_config,
    load_config,
    save_config,
    update_config_value,
)
from photosweep.exceptions import ConfigError


class TestDetectionSettings:
    """Test settings overrides and validation."""

    def test_defaults(self):
        settings = DetectionSettings()
        assert settings.window_radius == 25
        assert settings.old_unused_ms == 365 * 24 * 60 * 60 * 1000
        assert (1080, 1920) in settings.screenshot_resolutions

    def test_overrides(self):
        settings = DetectionSettings().with_overrides(window_radius=10, similar_size_ratio=0.2)
        assert settings.window_radius == 10
        assert settings.similar_size_ratio == 0.2
        assert DetectionSettings().window_radius == 25

    def test_integral_float_becomes_int(self):
        settings = DetectionSettings().with_overrides(max_similar=7.0)
        assert settings.max_similar == 7
        assert isinstance(settings.max_similar, int)

    def test_unknown_key_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            settings = DetectionSettings().with_overrides(no_such_setting=1)
        assert settings == DetectionSettings()
        assert "no_such_setting" in caplog.text

    @pytest.mark.parametrize("value", ["ten", True, None, [1]])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(ConfigError):
            DetectionSettings().with_overrides(window_radius=value)

    @pytest.mark.parametrize("key", ["signature_chunk_size", "window_radius", "filename_pass_cap"])
    def test_fractional_value_for_whole_number_setting_rejected(self, key):
        with pytest.raises(ConfigError):
            DetectionSettings().with_overrides(**{key: 2.5})

    def test_fractional_value_for_ratio_setting_kept(self):
        settings = DetectionSettings().with_overrides(low_quality_bytes_per_pixel=0.25)
        assert settings.low_quality_bytes_per_pixel == 0.25

    @pytest.mark.parametrize("key", ["signature_chunk_size", "categorize_yield_every"])
    @pytest.mark.parametrize("value", [0, -5])
    def test_step_sizes_must_be_positive(self, key, value):
        with pytest.raises(ConfigError):
            DetectionSettings().with_overrides(**{key: value})

    def test_fractional_chunk_size_in_config_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("detection:\n  signature_chunk_size: 2.5\n")
        with pytest.raises(ConfigError):
            DetectionSettings.from_config(load_config(path))

    def test_resolutions(self):
        settings = DetectionSettings().with_overrides(screenshot_resolutions=[[800, 600], ["720", "1280"]])
        assert settings.screenshot_resolutions == ((800, 600), (720, 1280))

    def test_bad_resolutions(self):
        with pytest.raises(ConfigError):
            DetectionSettings().with_overrides(screenshot_resolutions=[[800]])

    def test_from_config(self):
        settings = DetectionSettings.from_config({'detection': {'burst_min_neighbors': 4}})
        assert settings.burst_min_neighbors == 4

    def test_from_config_without_section(self):
        assert DetectionSettings.from_config({}) == DetectionSettings()
        assert DetectionSettings.from_config(None) == DetectionSettings()

    def test_from_config_bad_section(self):
        with pytest.raises(ConfigError):
            DetectionSettings.from_config({'detection': ['window_radius']})


class TestLoadConfig:
    """Test YAML configuration loading."""

    def test_packaged_config_matches_defaults(self):
        config = load_config()
        assert DetectionSettings.from_config(config) == DetectionSettings()
        assert config['cleanup']['large_file_bytes'] == 5 * 1024 * 1024

    def test_packaged_config_matches_default_config(self):
        with open(DEFAULT_CONFIG_PATH) as f:
            packaged = yaml.safe_load(f)
        assert packaged == get_default_config()

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == get_default_config()

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("detection: [unclosed\n")
        assert load_config(path) == get_default_config()

    def test_custom_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("detection:\n  window_radius: 3\n")
        settings = DetectionSettings.from_config(load_config(path))
        assert settings.window_radius == 3
        assert settings.max_similar == 5

    def test_env_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PHOTOSWEEP_LEVEL", "DEBUG")
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: ${PHOTOSWEEP_LEVEL}\n  format: ${UNSET_PHOTOSWEEP_VAR}\n")
        config = load_config(path)
        assert config['logging']['level'] == "DEBUG"
        assert config['logging']['format'] == "${UNSET_PHOTOSWEEP_VAR}"

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "saved.yaml"
        config = get_default_config()
        update_config_value(config, 'detection.window_radius', 12)

        assert save_config(config, path)
        assert get_config_value(load_config(path), 'detection.window_radius') == 12


class TestConfigValues:
    """Test dot-path access helpers."""

    def test_get(self):
        config = {'a': {'b': {'c': 1}}}
        assert get_config_value(config, 'a.b.c') == 1
        assert get_config_value(config, 'a.x', 'fallback') == 'fallback'
        assert get_config_value(config, 'a.b.c.d') is None

    def test_update_creates_sections(self):
        config = {}
        update_config_value(config, 'cleanup.large_file_bytes', 10)
        assert config == {'cleanup': {'large_file_bytes': 10}}
