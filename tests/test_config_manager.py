"""Tests for config.config_manager.ConfigManager."""
import pytest
import yaml

from config.config_manager import DEFAULT_CONFIG, ConfigManager


class TestConfigManager:
    def test_writes_defaults_on_first_run(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        manager = ConfigManager(str(path))
        assert path.exists()
        assert manager.get("slideshow.default_timeout_ms") == 5000
        assert yaml.safe_load(path.read_text())["slideshow"]["fullscreen"] is True

    def test_user_values_merge_over_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("slideshow:\n  shuffle: true\ngui:\n  margin: 0\n")
        manager = ConfigManager(str(path))
        assert manager.get("slideshow.shuffle") is True
        assert manager.get("slideshow.default_timeout_ms") == 5000
        assert manager.get("gui.margin", 8) == 0
        assert manager.get("hotkeys.space.sequence") == "Space"

    def test_get_missing_key_returns_default(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "config.yaml"))
        assert manager.get("no.such.key", "fallback") == "fallback"
        assert manager.get("slideshow.default_timeout_ms.deeper", 1) == 1

    def test_set_persists(self, tmp_path):
        path = tmp_path / "config.yaml"
        manager = ConfigManager(str(path))
        manager.set("slideshow.default_timeout_ms", 3000)
        assert ConfigManager(str(path)).get("slideshow.default_timeout_ms") == 3000

    def test_set_does_not_touch_defaults(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "config.yaml"))
        manager.set("gui.margin", 42)
        assert DEFAULT_CONFIG["gui"]["margin"] == 8

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert ConfigManager(str(path)).logging_level == "INFO"

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("slideshow: [unclosed\n")
        with pytest.raises(ValueError):
            ConfigManager(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            ConfigManager(str(path))

    def test_xdg_location(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        manager = ConfigManager()
        assert manager.config_path == str(tmp_path / "photo-slideshow" / "config.yaml")
