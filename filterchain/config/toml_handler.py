"""
TOML File I/O Handler.

Reads configuration with tomllib and writes it back with tomlkit, which keeps
comments and formatting of hand-edited files.
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from filterchain.config.schema import ConfigField


class TOMLError(Exception):
    """Base exception for TOML-related errors."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Raises:
        TOMLError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise TOMLError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to read TOML file {file_path}: {e}") from e


def write_toml(file_path: Path, data: dict[str, Any]) -> None:
    """
    Write data to a TOML file, creating parent directories as needed.

    Existing tables keep their comments when the file already exists.

    Raises:
        TOMLError: If file cannot be written
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if file_path.exists():
            doc = tomlkit.parse(file_path.read_text(encoding="utf-8"))
        else:
            doc = tomlkit.document()

        for key, value in data.items():
            if key in doc and isinstance(value, dict) and isinstance(doc[key], dict):
                for sub_key, sub_value in value.items():
                    doc[key][sub_key] = sub_value
            else:
                doc[key] = value

        with open(file_path, "w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)
    except (OSError, TOMLKitError) as e:
        raise TOMLError(f"Failed to write TOML file {file_path}: {e}") from e


def generate_toml_from_schema(
    chain_name: str, schema: dict[str, ConfigField], config_data: dict[str, Any]
) -> str:
    """
    Render a chain table with descriptive comments.

    Args:
        chain_name: Name of the chain (used as table header)
        schema: Schema dictionary (field_name -> ConfigField)
        config_data: Current values; missing fields use their defaults

    Returns:
        TOML string with comments
    """
    doc = tomlkit.document()
    doc.add(tomlkit.comment(f"Configuration for filter chain {chain_name}"))
    doc.add(tomlkit.nl())

    table = tomlkit.table()
    for field_name, field in schema.items():
        if field.description:
            table.add(tomlkit.comment(field.description))
        table.add(field_name, config_data.get(field_name, field.default))
        table.add(tomlkit.nl())

    doc.add(chain_name, table)
    return tomlkit.dumps(doc)
