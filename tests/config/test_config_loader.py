# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for config loader — the entry point for all config loading in optiloop.

We test:
  1. Valid YAML loads into a frozen, correct config object
  2. Missing required fields raise ConfigValidationError
  3. Unknown fields raise ConfigValidationError (extra="forbid")
  4. Broken YAML raises ConfigLoadError
  5. Loaded config is truly immutable
  6. Errors name the offending field; foreign config versions are refused
"""

import textwrap
from pathlib import Path

import pytest

from optiloop.config.exceptions import ConfigLoadError, ConfigValidationError
from optiloop.config.loader import load_config


class TestLoadValidConfig:
    def test_loads_minimal_valid_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.global_config.project_name == "optiloop-test"
        assert config.global_config.seed == 42
        assert config.global_config.config_version == "1.0.0"

    def test_default_directories_are_populated(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        dirs = config.global_config.directories
        assert dirs.checkpoints == "checkpoints"
        assert dirs.logs == "logs"
        assert dirs.output == "output"

    def test_optional_sections_default_to_none(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.problem is None
        assert config.solver is None
        assert config.executor is None
        assert config.docs is None
        assert config.observers == []

    def test_loads_run_config(self, run_config_file: Path) -> None:
        config = load_config(run_config_file)
        assert config.problem is not None
        assert config.problem.function == "sphere"
        assert config.problem.init_param == [1.0, -1.0]
        assert config.solver is not None
        assert config.solver.init_temp == 2.0
        assert config.executor is not None
        assert config.executor.max_iters == 30

    def test_shipped_example_config_is_valid(self) -> None:
        example = Path(__file__).resolve().parents[2] / "configs" / "rosenbrock.yaml"
        config = load_config(example)
        assert config.problem is not None
        assert config.problem.function == "rosenbrock"
        assert len(config.observers) == 2


class TestLoadInvalidConfig:
    def test_missing_required_field_raises_validation_error(
        self, invalid_config_file: Path
    ) -> None:
        with pytest.raises(ConfigValidationError):
            load_config(invalid_config_file)

    def test_unknown_field_raises_validation_error(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
              project_name: "test"
              seed: 42
              some_nonsense_field: true
        """)
        config_file = tmp_path / "unknown_field.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_wrong_type_raises_validation_error(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
              project_name: "test"
              seed: "not_a_number"
        """)
        config_file = tmp_path / "wrong_type.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_unknown_test_function_raises_validation_error(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
            problem:
              function: "himmelblau"
        """)
        config_file = tmp_path / "bad_function.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_non_mapping_yaml_raises_load_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- just\n- a\n- list\n", encoding="utf-8")

        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(config_file)

    def test_broken_yaml_raises_load_error(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(broken_yaml_file)

    def test_nonexistent_file_raises_load_error(self, tmp_path: Path) -> None:
        fake_path = tmp_path / "does_not_exist.yaml"
        with pytest.raises(ConfigLoadError):
            load_config(fake_path)

    def test_directory_path_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path)


class TestConfigImmutability:
    def test_cannot_mutate_frozen_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        with pytest.raises(Exception):
            config.global_config.seed = 999  # type: ignore[misc]

    def test_cannot_mutate_nested_directories(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        with pytest.raises(Exception):
            config.global_config.directories.logs = "/hacked"  # type: ignore[misc]


class TestValidationMessages:
    def test_errors_name_the_offending_field(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
            problem:
              function: "sphere"
              step_size: -1.0
        """)
        config_file = tmp_path / "bad_step.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError, match=r"problem\.step_size:"):
            load_config(config_file)

    def test_cross_field_errors_are_reported(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
            problem:
              function: "rosenbrock"
              init_param: [1.0]
        """)
        config_file = tmp_path / "rosenbrock_1d.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError, match="at least two coordinates"):
            load_config(config_file)


class TestConfigVersion:
    @pytest.mark.parametrize("version", ["1.0.0", "1.4", "1"])
    def test_supported_major_loads(self, tmp_path: Path, version: str) -> None:
        config_file = tmp_path / "versioned.yaml"
        config_file.write_text(f'global:\n  config_version: "{version}"\n', encoding="utf-8")
        assert load_config(config_file).global_config.config_version == version

    @pytest.mark.parametrize("version", ["2.0.0", "0.9", "v1"])
    def test_other_majors_are_rejected(self, tmp_path: Path, version: str) -> None:
        config_file = tmp_path / "versioned.yaml"
        config_file.write_text(f'global:\n  config_version: "{version}"\n', encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="Unsupported config_version"):
            load_config(config_file)
