"""
Runtime Configuration Access.

ConfigProxy exposes one chain's settings table as attributes. Writes are
validated against the schema and flushed to the TOML file immediately.
"""

import threading
from pathlib import Path
from typing import Any

from filterchain.config.schema import (
    ConfigField,
    generate_default_config,
    validate_config,
)
from filterchain.config.toml_handler import TOMLError, read_toml, write_toml


class ConfigRuntimeError(Exception):
    """Base exception for runtime config errors."""

    pass


class ConfigProxy:
    """
    Attribute access to a chain's settings with auto-flush on write.

    Example:
        cfg = ConfigProxy('orders', CHAIN_SCHEMA, Path('config/filterchain.toml'))
        cfg.thread_guard          # Read
        cfg.thread_guard = True   # Write (flushed to file)
    """

    def __init__(
        self,
        chain_name: str,
        schema: dict[str, ConfigField],
        config_file: Path,
    ):
        # object.__setattr__ bypasses our __setattr__
        object.__setattr__(self, "_chain_name", chain_name)
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_config_file", config_file)
        object.__setattr__(self, "_lock", threading.Lock())
        object.__setattr__(self, "_cache", generate_default_config(schema))

        self._load_config()

    def _load_config(self) -> None:
        """Overlay values from the file (if any) on top of the defaults."""
        if not self._config_file.exists():
            return
        try:
            data = read_toml(self._config_file)
        except TOMLError as e:
            raise ConfigRuntimeError(f"Failed to load config: {e}") from e

        table = data.get(self._chain_name)
        if table is None:
            return
        if not isinstance(table, dict):
            raise ConfigRuntimeError(
                f"Failed to load config: '{self._chain_name}' is not a table"
            )
        validate_config(table, self._schema)
        self._cache.update(table)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return object.__getattribute__(self, name)

        if name not in self._schema:
            raise AttributeError(
                f"Configuration field '{name}' not found in schema for chain {self._chain_name}"
            )
        return self._cache[name]

    def __setattr__(self, name: str, value: Any) -> None:
        """
        Set a value and flush it to the TOML file.

        Raises:
            AttributeError: If field doesn't exist in schema
            ValidationError: If value fails validation
        """
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return

        if name not in self._schema:
            raise AttributeError(
                f"Configuration field '{name}' not found in schema for chain {self._chain_name}"
            )

        self._schema[name].validate(value)

        with self._lock:
            self._cache[name] = value
            self._flush()

    def as_dict(self) -> dict[str, Any]:
        """Copy of the current settings."""
        return dict(self._cache)

    def _flush(self) -> None:
        """Write the chain table back to the file. Called with self._lock held."""
        try:
            write_toml(self._config_file, {self._chain_name: dict(self._cache)})
        except TOMLError as e:
            raise ConfigRuntimeError(f"Failed to flush config to file: {e}") from e

    def __repr__(self) -> str:
        return f"ConfigProxy({self._chain_name}, {self._cache})"
