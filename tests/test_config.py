import os

import pytest
import toml
import yaml

from dirwatcher import config
from dirwatcher.exceptions import ConfigError


def test_load_config(tmp_path):
    config_data = {
        "watch": {"root": "watched", "backend": "watchdog", "poll_interval": 2},
        "logging": {"level": "DEBUG"},
    }
    config_file = tmp_path / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(config_data, f)

    loaded_config = config.load_config(str(config_file))
    assert loaded_config["watch"]["backend"] == "watchdog"
    assert loaded_config["watch"]["poll_interval"] == 2.0
    assert loaded_config["watch"]["placeholder"] == "New folder"
    assert loaded_config["logging"]["level"] == "DEBUG"
    assert loaded_config["logging"]["log_file"] == "dirwatcher.log"
    assert loaded_config[config.CONFIG_PATH_KEY] == str(config_file)
    assert config.get_watch_root(loaded_config) == str(tmp_path / "watched")
    assert config.get_pid_file(loaded_config) == str(tmp_path / "logs" / "dirwatcher.pid")


def test_load_yaml_config(tmp_path):
    config_file = tmp_path / "config.yaml"
    with open(config_file, "w") as f:
        yaml.dump({"watch": {"placeholder": "Untitled Folder", "max_depth": 8}}, f)

    loaded_config = config.load_config(str(config_file))
    assert loaded_config["watch"]["placeholder"] == "Untitled Folder"
    assert loaded_config["watch"]["max_depth"] == 8


def test_env_config_dir(tmp_path, monkeypatch):
    with open(tmp_path / "config.toml", "w") as f:
        toml.dump({"watch": {"root": "/srv/share"}}, f)
    monkeypatch.setenv(config.ENV_CONFIG_DIR_VAR, str(tmp_path))

    loaded_config = config.load_config()
    assert config.get_watch_root(loaded_config) == "/srv/share"


def test_missing_explicit_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        config.load_config(str(tmp_path / "nope.toml"))


def test_missing_default_config_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv(config.ENV_CONFIG_DIR_VAR, raising=False)
    monkeypatch.chdir(tmp_path)

    loaded_config = config.load_config()
    assert loaded_config[config.CONFIG_PATH_KEY] is None
    assert loaded_config["watch"] == config.DEFAULT_CONFIG["watch"]
    assert config.get_watch_root(loaded_config) == os.path.normpath(str(tmp_path))


@pytest.mark.parametrize("override, message", [
    ({"watch": {"backend": "inotify"}}, "watch.backend"),
    ({"watch": {"poll_interval": 0}}, "watch.poll_interval"),
    ({"watch": {"poll_interval": "soon"}}, "watch.poll_interval"),
    ({"watch": {"max_depth": 0}}, "watch.max_depth"),
    ({"watch": {"follow_symlinks": "yes"}}, "watch.follow_symlinks"),
    ({"watch": {"placeholder": 3}}, "watch.placeholder"),
    ({"logging": {"utc_offset_hours": 30}}, "logging.utc_offset_hours"),
    ({"watch": "everything"}, "'watch' section"),
])
def test_validate_config_rejects(override, message):
    cfg = config.merge_config(config.DEFAULT_CONFIG, override)
    with pytest.raises(ConfigError, match=message):
        config.validate_config(cfg)


def test_invalid_toml(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[watch\nroot = ")
    with pytest.raises(ConfigError):
        config.load_config(str(config_file))


def test_merge_config_does_not_mutate_defaults():
    merged = config.merge_config(config.DEFAULT_CONFIG, {"watch": {"root": "/data"}})
    assert merged["watch"]["root"] == "/data"
    assert config.DEFAULT_CONFIG["watch"]["root"] == "./"
