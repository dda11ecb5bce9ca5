import copy
import os

import toml
import yaml

from dirwatcher.exceptions import ConfigError

DEFAULT_CONFIG_PATH = "./config.toml"
ENV_CONFIG_DIR_VAR = "DIRWATCHER_CONFIG_DIR"
CONFIG_PATH_KEY = "__config_path__"

BACKENDS = ("poll", "watchdog")

DEFAULT_CONFIG = {
    "watch": {
        "root": "./",
        "backend": "poll",
        "poll_interval": 1.0,
        "placeholder": "New folder",
        "follow_symlinks": True,
        "max_depth": None,
    },
    "logging": {
        "log_dir": "logs",
        "log_file": "dirwatcher.log",
        "level": "INFO",
        "console": True,
        "utc_offset_hours": -5,
        "timestamp_format": "%Y-%m-%d %H:%M:%S %z",
    },
    "daemon": {
        "pid_file": "dirwatcher.pid",
    },
}


def find_config_path(cli_config_path=None):
    """
    Work out which configuration file to read.

    Precedence:
      1. cli_config_path if provided.
      2. Environment variable DIRWATCHER_CONFIG_DIR (looking for config.toml).
      3. Default to ./config.toml.

    Returns:
        tuple: (path, explicit) where explicit is False only for the default.
    """
    if cli_config_path:
        return cli_config_path, True
    if os.environ.get(ENV_CONFIG_DIR_VAR):
        return os.path.join(os.environ[ENV_CONFIG_DIR_VAR], "config.toml"), True
    return DEFAULT_CONFIG_PATH, False


def read_config_file(config_path):
    """
    Parse a TOML or YAML configuration file into a dict.

    Files ending in .yaml or .yml are read with PyYAML, everything else as TOML.
    """
    try:
        with open(config_path, "r") as f:
            if config_path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(f)
            else:
                data = toml.load(f)
    except (toml.TomlDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to parse configuration {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")
    return data


def merge_config(base, override):
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(cli_config_path=None):
    """
    Load configuration and merge it over the defaults.

    An explicitly requested file that does not exist is an error; a missing
    ./config.toml just means the defaults are used.

    Returns:
        dict: The validated configuration settings. The path of the file that
        was read (or None) is stored under the "__config_path__" key.
    """
    config_path, explicit = find_config_path(cli_config_path)

    if os.path.exists(config_path):
        data = read_config_file(config_path)
    elif explicit:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        config_path = None
        data = {}

    config_data = merge_config(DEFAULT_CONFIG, data)
    validate_config(config_data)
    config_data[CONFIG_PATH_KEY] = os.path.abspath(config_path) if config_path else None
    return config_data


def validate_config(config_data):
    """
    Check the values DirWatcher depends on.

    Raises:
        ConfigError: On the first invalid value found.
    """
    for section in ("watch", "logging", "daemon"):
        if not isinstance(config_data.get(section), dict):
            raise ConfigError(f"'{section}' section must be a mapping")

    watch = config_data["watch"]
    if not isinstance(watch.get("root"), str) or not watch["root"]:
        raise ConfigError("watch.root must be a non-empty string")

    if watch.get("backend") not in BACKENDS:
        raise ConfigError(f"watch.backend must be one of: {', '.join(BACKENDS)}")

    try:
        poll_interval = float(watch.get("poll_interval"))
    except (TypeError, ValueError) as e:
        raise ConfigError("watch.poll_interval must be numeric") from e
    if poll_interval <= 0:
        raise ConfigError("watch.poll_interval must be positive")
    watch["poll_interval"] = poll_interval

    placeholder = watch.get("placeholder")
    if placeholder is not None and not isinstance(placeholder, str):
        raise ConfigError("watch.placeholder must be a string")

    if not isinstance(watch.get("follow_symlinks"), bool):
        raise ConfigError("watch.follow_symlinks must be a boolean")

    max_depth = watch.get("max_depth")
    if max_depth is not None:
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
            raise ConfigError("watch.max_depth must be a positive integer")

    offset = config_data["logging"].get("utc_offset_hours")
    if isinstance(offset, bool) or not isinstance(offset, (int, float)) or not -24 < offset < 24:
        raise ConfigError("logging.utc_offset_hours must be a number between -24 and 24")


def config_dir(config_data):
    """Directory relative paths in the configuration are resolved against."""
    config_path = config_data.get(CONFIG_PATH_KEY)
    if config_path:
        return os.path.dirname(config_path)
    return os.getcwd()


def resolve_path(config_data, path):
    """Resolve a configured path against the configuration directory."""
    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(config_dir(config_data), path))


def get_watch_root(config_data):
    return resolve_path(config_data, config_data["watch"]["root"])


def get_log_dir(config_data):
    return resolve_path(config_data, config_data["logging"]["log_dir"])


def get_pid_file(config_data):
    return os.path.join(get_log_dir(config_data), config_data["daemon"]["pid_file"])
