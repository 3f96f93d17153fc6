"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from nodexpr._evaluate import Precision


class ConfigError(Exception):
    """Error in nodexpr configuration."""


@dataclass(slots=True, frozen=True)
class NodexprConfig:
    """Configuration loaded from the ``[tool.nodexpr]`` table of pyproject.toml.

    Relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    precision: Precision | None = None
    input: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_precision(value: object) -> Precision:
    if not isinstance(value, str):
        msg = "Invalid [tool.nodexpr].precision: expected string"
        raise ConfigError(msg)
    try:
        return Precision(value)
    except ValueError as e:
        choices = ", ".join(f"'{p}'" for p in Precision)
        msg = f"Invalid [tool.nodexpr].precision '{value}'. Expected one of: {choices}"
        raise ConfigError(msg) from e


def load_config(pyproject_path: Path) -> NodexprConfig:
    """Load and validate [tool.nodexpr] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed NodexprConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("nodexpr", {})
    if not section:
        return NodexprConfig(project_root=project_root)

    precision: Precision | None = None
    if "precision" in section:
        precision = _parse_precision(section["precision"])

    input_path: Path | None = None
    if "input" in section:
        input_value = section["input"]
        if not isinstance(input_value, str):
            msg = "Invalid [tool.nodexpr].input: expected string path"
            raise ConfigError(msg)
        input_path = Path(input_value)
        if not input_path.is_absolute():
            input_path = project_root / input_path

    return NodexprConfig(
        precision=precision,
        input=input_path,
        project_root=project_root,
    )


def get_config() -> NodexprConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        NodexprConfig (may be empty if no pyproject.toml or no [tool.nodexpr] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return NodexprConfig()
    return load_config(pyproject_path)
