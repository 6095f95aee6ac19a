"""Configuration management for Flow.

Settings live in a YAML file (``~/.flow/config.yml``) and are checked
against a JSON schema every time they are loaded or changed. Keys are
addressed with dot notation, e.g. ``tracking.poll_interval``.
"""

import copy
from pathlib import Path
from typing import Any, Iterator, Optional

import yaml  # type: ignore[import-untyped]
from jsonschema import Draft7Validator  # type: ignore[import-untyped]

DEFAULT_CONFIG: dict[str, Any] = {
    "version": "1.0",
    "general": {
        "data_dir": "~/.flow/data",
        "store_file": "store.json",
    },
    "tracking": {
        "poll_interval": 1,
        "deactivate_on_delete": True,
        "restore_on_start": True,
    },
    "notifications": {
        "enabled": False,
        "backend": "auto",
    },
    "api": {
        "host": "localhost",
        "port": 8765,
        "cors": {
            "enabled": True,
            "origins": ["http://localhost:1420", "tauri://localhost"],
        },
        "advanced": {
            "log_level": "info",
            "access_log": True,
        },
    },
    "advanced": {
        "backup_on_start": True,
        "log_level": "INFO",
    },
}


def _section(**properties: Any) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


BOOLEAN = {"type": "boolean"}
STRING = {"type": "string"}

CONFIG_SCHEMA: dict[str, Any] = {
    **_section(
        version=STRING,
        general=_section(data_dir=STRING, store_file={"type": "string", "minLength": 1}),
        tracking=_section(
            poll_interval={"type": "number", "minimum": 1, "maximum": 60},
            deactivate_on_delete=BOOLEAN,
            restore_on_start=BOOLEAN,
        ),
        notifications=_section(
            enabled=BOOLEAN,
            backend={"type": "string", "enum": ["auto", "plyer"]},
        ),
        api=_section(
            host=STRING,
            port={"type": "integer", "minimum": 1, "maximum": 65535},
            cors=_section(enabled=BOOLEAN, origins={"type": "array", "items": STRING}),
            advanced=_section(log_level=STRING, access_log=BOOLEAN),
        ),
        advanced=_section(
            backup_on_start=BOOLEAN,
            log_level={"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
        ),
    ),
    "required": ["version"],
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``override`` merged in, recursing into dicts."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def iter_keys(tree: dict[str, Any], prefix: str = "") -> Iterator[str]:
    """Yield the dotted path of every leaf value."""
    for key, value in tree.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from iter_keys(value, f"{path}.")
        else:
            yield path


def check_config(config: dict[str, Any]) -> None:
    """Validate a configuration tree.

    Raises:
        ValueError: Listing every schema violation
    """
    errors = sorted(Draft7Validator(CONFIG_SCHEMA).iter_errors(config), key=lambda e: list(e.path))
    if errors:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors
        )
        raise ValueError(f"Invalid configuration: {problems}")


class ConfigManager:
    """Manage application configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        """Load the configuration, writing defaults on first use.

        Args:
            config_path: Path to config file. Defaults to ~/.flow/config.yml

        Raises:
            ValueError: If the file on disk is invalid. It is moved to
                ``config.yml.backup`` and defaults are written in its place
        """
        self.config_path = config_path or Path.home() / ".flow" / "config.yml"
        self._config: dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

        if not self.config_path.exists():
            self.save()
            return

        with open(self.config_path, encoding="utf-8") as f:
            self._config = deep_merge(DEFAULT_CONFIG, yaml.safe_load(f) or {})

        try:
            check_config(self._config)
        except ValueError as e:
            self.config_path.replace(self.backup_path)
            self.reset()
            raise ValueError(
                f"Config validation failed, backed up to {self.backup_path}. "
                f"Using defaults. {e}"
            )

    @property
    def backup_path(self) -> Path:
        return self.config_path.with_suffix(".yml.backup")

    @property
    def data_dir(self) -> Path:
        """Expanded data directory."""
        return Path(self.get("general.data_dir", "~/.flow/data")).expanduser()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key.

        Example:
            >>> config.get('tracking.poll_interval')
            1
            >>> config.get('nonexistent.key', 'default')
            'default'
        """
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dotted key and save.

        Raises:
            ValueError: If the result does not validate. Nothing is changed
        """
        updated = copy.deepcopy(self._config)
        *parents, leaf = key.split(".")
        node = updated
        for part in parents:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ValueError(f"Invalid configuration: {part} is not a section")
        node[leaf] = value

        check_config(updated)
        self._config = updated
        self.save()

    def validate(self) -> bool:
        """Validate the loaded configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        check_config(self._config)
        return True

    def save(self) -> None:
        """Write configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            yaml.safe_dump(self._config, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )

    def reset(self) -> None:
        """Restore and save the default configuration."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        self.save()

    def to_dict(self) -> dict[str, Any]:
        """Get full configuration as dictionary."""
        return copy.deepcopy(self._config)

    def get_all_keys(self) -> list[str]:
        """Dotted keys of every setting, in file order."""
        return list(iter_keys(self._config))
