"""
Filterchain Configuration - TOML-based settings per named chain.

Every named chain may have a table in the config file:

    [orders]
    thread_guard = true
    warn_on_idle_disregard = false
    box_events = true

Example usage:
    import filterchain.config

    cfg = filterchain.config.get('orders')
    cfg.thread_guard            # Read
    cfg.thread_guard = True     # Write (auto-flushes)

    chain = filterchain.config.build_chain('orders', on_disregard=print)
"""

from collections.abc import Callable
from pathlib import Path

from filterchain.config.runtime import ConfigProxy
from filterchain.config.schema import CHAIN_SCHEMA, ConfigField
from filterchain.config.toml_handler import generate_toml_from_schema
from filterchain.core.chain import FilterChain, SynchronizedFilterChain

# Default config file path
_config_file = Path("config/filterchain.toml")


class ConfigError(Exception):
    """Base exception for config API errors."""

    pass


def set_config_file(path: str | Path) -> None:
    """Use path instead of config/filterchain.toml for subsequent get() calls."""
    global _config_file
    _config_file = Path(path)


def config_file() -> Path:
    """Path currently used for chain settings."""
    return _config_file


def get(chain_name: str) -> ConfigProxy:
    """
    Runtime settings accessor for a chain.

    Raises:
        ConfigError: If chain_name is empty
    """
    if not chain_name:
        raise ConfigError("Chain name must not be empty")
    return ConfigProxy(chain_name, CHAIN_SCHEMA, _config_file)


def build_chain(
    chain_name: str,
    on_disregard: Callable[[str], None] | None = None,
    settings: ConfigProxy | None = None,
) -> FilterChain:
    """
    Construct the chain class selected by the chain's settings.

    Args:
        chain_name: Name of the chain (settings table and diagnostics)
        on_disregard: Disregard callback; the chain's no-op default if None
        settings: Settings to use instead of loading them with get()

    Returns:
        SynchronizedFilterChain if thread_guard is set, FilterChain otherwise
    """
    if settings is None:
        settings = get(chain_name)

    chain_cls = SynchronizedFilterChain if settings.thread_guard else FilterChain
    kwargs = {
        "name": chain_name,
        "warn_on_idle_disregard": settings.warn_on_idle_disregard,
    }
    if on_disregard is None:
        return chain_cls(**kwargs)
    return chain_cls(on_disregard, **kwargs)


def generate(chain_name: str) -> str:
    """Commented TOML table holding the chain's current settings."""
    return generate_toml_from_schema(
        chain_name, CHAIN_SCHEMA, get(chain_name).as_dict()
    )


__all__ = [
    "CHAIN_SCHEMA",
    "ConfigError",
    "ConfigField",
    "ConfigProxy",
    "build_chain",
    "config_file",
    "generate",
    "get",
    "set_config_file",
]
