"""
Configuration for the code generator pipeline.

A configuration file names the input document, the output directory and
one generation entry per target. YAML and JSON files are accepted; keys may
use snake_case or camelCase.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..loader import INPUT_FORMATS
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".openapi_to_code.yaml"
CONFIG_VERSION = "1"


def _pick(d: dict, *keys: str, default: Any = None) -> Any:
    """Get the first present key among several spellings."""
    for key in keys:
        if key in d:
            return d[key]
    return default


def _require_mapping(value: Any, where: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{where}' must be a mapping, got {type(value).__name__}")
    return value


@dataclass
class InputConfig:
    """Where the OpenAPI document comes from."""

    # Path of the document (YAML or JSON)
    source: str = ""

    # "openapi" picks JSON or YAML from the file suffix, "json" and "yaml" force one
    format: str = "openapi"

    options: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict) -> InputConfig:
        """Create an input config from a dictionary."""
        d = _require_mapping(d, "input")
        input_format = str(d.get("format", "openapi"))
        if input_format not in INPUT_FORMATS:
            raise ConfigError(f"Unknown input format '{input_format}' (known: {', '.join(INPUT_FORMATS)})")
        return InputConfig(
            source=str(d.get("source", "")),
            format=input_format,
            options=dict(_require_mapping(d.get("options"), "input.options")),
        )

    def to_dict(self) -> dict:
        return {"source": self.source, "format": self.format, "options": self.options}


@dataclass
class GenerationConfig:
    """One generator run."""

    # Registered generator name ("zod", "typescript", "golang")
    generator: str = ""

    # Output file, relative to the output directory
    output_file: str = ""

    enabled: bool = True

    # Directory whose templates override the built-in ones
    template: str | None = None

    # Generator specific options (e.g. {"package": "petstore"} for golang)
    options: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict) -> GenerationConfig:
        """Create a generation config from a dictionary."""
        d = _require_mapping(d, "generations[]")
        generator = d.get("generator")
        if not generator:
            raise ConfigError("Every generation entry needs a 'generator'")
        return GenerationConfig(
            generator=str(generator),
            output_file=str(_pick(d, "output_file", "outputFile", default="")),
            enabled=bool(d.get("enabled", True)),
            template=d.get("template"),
            options=dict(_require_mapping(d.get("options"), "generations[].options")),
        )

    def to_dict(self) -> dict:
        return {
            "generator": self.generator,
            "output_file": self.output_file,
            "enabled": self.enabled,
            "template": self.template,
            "options": self.options,
        }


@dataclass
class HooksConfig:
    """Shell commands run around generation."""

    before_generate: list[str] = field(default_factory=list)
    after_generate: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict) -> HooksConfig:
        """Create a hooks config from a dictionary."""
        d = _require_mapping(d, "hooks")
        return HooksConfig(
            before_generate=_command_list(_pick(d, "before_generate", "beforeGenerate"), "hooks.before_generate"),
            after_generate=_command_list(_pick(d, "after_generate", "afterGenerate"), "hooks.after_generate"),
        )

    def to_dict(self) -> dict:
        return {"before_generate": self.before_generate, "after_generate": self.after_generate}


def _command_list(value: Any, where: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"'{where}' must be a command or a list of commands")
    return [str(command) for command in value]


@dataclass
class GeneratorConfig:
    """Configuration options for code generation."""

    version: str = CONFIG_VERSION

    input: InputConfig = field(default_factory=InputConfig)

    # Output directory for every generation
    output: str = "."

    generations: list[GenerationConfig] = field(default_factory=list)

    hooks: HooksConfig = field(default_factory=HooksConfig)

    # Per-generator scalar overrides: {"typescript": {"date-time": "Date"}}
    type_mapping: dict[str, dict[str, str]] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        d = _require_mapping(d, "config")
        type_mapping = _require_mapping(_pick(d, "type_mapping", "typeMapping"), "type_mapping")
        for generator, mapping in type_mapping.items():
            _require_mapping(mapping, f"type_mapping.{generator}")

        generations = d.get("generations") or []
        if not isinstance(generations, list):
            raise ConfigError("'generations' must be a list")

        return GeneratorConfig(
            version=str(d.get("version", CONFIG_VERSION)),
            input=InputConfig.from_dict(d.get("input")),
            output=str(d.get("output", ".")),
            generations=[GenerationConfig.from_dict(g) for g in generations],
            hooks=HooksConfig.from_dict(d.get("hooks")),
            type_mapping={str(k): {str(a): str(b) for a, b in v.items()} for k, v in type_mapping.items()},
        )

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "version": self.version,
            "input": self.input.to_dict(),
            "output": self.output,
            "generations": [g.to_dict() for g in self.generations],
            "hooks": self.hooks.to_dict(),
            "type_mapping": self.type_mapping,
        }

    def enabled_generations(self) -> list[GenerationConfig]:
        return [g for g in self.generations if g.enabled]

    def type_mapping_for(self, generator: str) -> dict[str, str]:
        return dict(self.type_mapping.get(generator, {}))

    def merge_with_cli_args(self, spec: str | None = None, output: str | None = None) -> GeneratorConfig:
        """
        Apply command line values over the file values.

        Args:
            spec: Input document path
            output: Output directory

        Returns:
            self, for chaining
        """
        if spec:
            self.input.source = spec
        if output:
            self.output = output
        return self


def load_config(path: str | Path | None = None) -> GeneratorConfig:
    """
    Load a configuration file.

    Args:
        path: Config file path; None means the default path, which may be absent

    Returns:
        The loaded config, or defaults when the default file does not exist

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid
    """
    explicit = path is not None
    config_path = Path(path) if explicit else Path(DEFAULT_CONFIG_PATH)

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return GeneratorConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    logger.debug("Loaded config from %s", config_path)
    return GeneratorConfig.from_dict(data or {})
