# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader — turns a YAML run description into a validated, frozen OptiloopConfig.

The pipeline:
  1. Read the file (missing files and directories are load errors)
  2. Parse it as YAML; the top level has to be a mapping
  3. Validate the mapping against the pydantic schema
  4. Check that `global.config_version` belongs to a release line this
     loader understands

Validation failures are reported one line per offending field, with the
dotted path into the YAML (`problem.init_param`, `observers.1.interval`),
so a broken run config can be fixed without reading pydantic's full dump.
Nothing gets evaluated before the whole config passed.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from optiloop.config.exceptions import ConfigLoadError, ConfigValidationError
from optiloop.config.schema import OptiloopConfig
from optiloop.utils.filesystem import safe_read

SUPPORTED_CONFIG_MAJOR = 1


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed mapping.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't a YAML mapping.
    """
    try:
        raw_text = safe_read(config_path)
    except FileNotFoundError as err:
        raise ConfigLoadError(f"Config file not found: {config_path}") from err
    except IsADirectoryError as err:
        raise ConfigLoadError(f"Config path is not a file: {config_path}") from err
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def format_validation_error(err: ValidationError) -> str:
    """One `path: message` line per error, paths dotted the way they appear in YAML."""
    lines = []
    for error in err.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        lines.append(f"  {location}: {error['msg']}")
    return "\n".join(lines)


def _check_config_version(config: OptiloopConfig, config_path: Path) -> None:
    version = config.global_config.config_version
    major = version.split(".", 1)[0]
    if not major.isdigit() or int(major) != SUPPORTED_CONFIG_MAJOR:
        raise ConfigValidationError(
            f"Unsupported config_version '{version}' in {config_path}: "
            f"this optiloop reads {SUPPORTED_CONFIG_MAJOR}.x configs"
        )


def load_config(config_path: Path) -> OptiloopConfig:
    """
    Load, validate, and freeze a run config.

    Args:
        config_path: Path to a YAML config file.

    Returns:
        A fully validated, frozen OptiloopConfig instance.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations (missing fields, wrong types,
            unknown keys) or a config_version from another major release.
    """
    raw_data = _read_yaml_file(config_path)

    try:
        config = OptiloopConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{format_validation_error(err)}"
        ) from err

    _check_config_version(config, config_path)
    return config
