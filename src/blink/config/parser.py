"""
YAML configuration parser for blink-search.

This module loads the location registry from the YAML configuration file.
A missing file is the documented first-run case and yields an empty registry
plus a hint; anything unreadable or malformed fails the whole load with
ConfigError so no partial registry is ever used.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging
from dataclasses import dataclass

from platformdirs import user_config_dir
from pydantic import ValidationError

from ..errors import ConfigError
from ..models.config import BlinkConfig, LocationRegistry


logger = logging.getLogger(__name__)

APP_NAME = "blink-search"
CONFIG_FILE_NAME = "blink.yml"


def config_dir() -> Path:
    """Directory holding the configuration file, logs and fzf history."""
    return Path(user_config_dir(APP_NAME, appauthor=False))


def default_config_path() -> Path:
    """Default location of the configuration file."""
    return config_dir() / CONFIG_FILE_NAME


@dataclass
class ConfigParseResult:
    """
    Result of configuration parsing operation.

    Attributes:
        config: The parsed and validated configuration
        registry: Ordered location registry built from the configuration
        config_path: Path to the configuration file used
        is_first_run: Whether the configuration file did not exist yet
        hint: One-time guidance for the user, if any
    """
    config: BlinkConfig
    registry: LocationRegistry
    config_path: Path
    is_first_run: bool
    hint: Optional[str] = None


class ConfigParser:
    """
    YAML configuration parser with validation and error handling.

    This class loads the configuration file, validates it into a BlinkConfig
    and builds the ordered LocationRegistry from it.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
        """
        Load and parse configuration from file.

        Args:
            config_path: Path to configuration file. If None, the default path is used.

        Returns:
            ConfigParseResult containing the configuration and its registry

        Raises:
            ConfigError: If the file cannot be read or is malformed
        """
        config_path = Path(config_path) if config_path else default_config_path()

        if not config_path.exists():
            self.logger.info(f"Configuration file not found, first run: {config_path}")
            config = BlinkConfig()
            return ConfigParseResult(
                config=config,
                registry=config.registry(),
                config_path=config_path,
                is_first_run=True,
                hint=f"No configuration found. Define locations in {config_path}"
            )

        config_data = self._load_yaml_file(config_path)
        config = self._validate_config_data(config_data, config_path)

        try:
            registry = config.registry()
        except ValueError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

        hint = None
        if registry.is_empty():
            hint = f"No locations defined. Define locations in {config_path}"

        self.logger.info(f"Configuration loaded from {config_path}: {len(registry)} locations")

        return ConfigParseResult(
            config=config,
            registry=registry,
            config_path=config_path,
            is_first_run=False,
            hint=hint
        )

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Load and parse YAML file.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML data as dictionary

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()

            # Handle empty files
            if not content.strip():
                self.logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            data = yaml.safe_load(content)

            if data is None:
                return {}

            if not isinstance(data, dict):
                raise ConfigError(f"Configuration file must contain a YAML object, got {type(data).__name__}")

            return data

        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax in {file_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read configuration file {file_path}: {e}") from e

    def _validate_config_data(self, config_data: Dict[str, Any], config_path: Path) -> BlinkConfig:
        """
        Validate configuration data structure and values.

        Raises:
            ConfigError: If any location is missing 'path' or 'mode' or has invalid values
        """
        try:
            return BlinkConfig.from_dict(config_data)
        except ValidationError as e:
            problems = []
            for error in e.errors():
                location = ".".join(str(part) for part in error['loc'])
                problems.append(f"{location}: {error['msg']}")
            raise ConfigError(
                f"Invalid configuration in {config_path}: {'; '.join(problems)}"
            ) from e

    def save_config(self, config: BlinkConfig, output_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Raises:
            ConfigError: If file cannot be written
        """
        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            yaml_content = self._generate_yaml_with_comments(config.to_dict())

            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(yaml_content)

            self.logger.info(f"Configuration saved to {output_path}")

        except OSError as e:
            raise ConfigError(f"Cannot write configuration file {output_path}: {e}") from e

    def _generate_yaml_with_comments(self, config_dict: Dict[str, Any]) -> str:
        """
        Generate YAML content with helpful comments.

        Args:
            config_dict: Configuration dictionary

        Returns:
            YAML content with comments
        """
        lines = [
            "# blink-search configuration",
            "# The first location is used when no location is given on the command line.",
            "",
        ]

        sections = [
            ("locations", "Search locations: path, mode (files or folders), optional cache_file"),
            ("fd_flags", "Extra flags passed to fd"),
            ("fzf_flags", "Extra flags passed to fzf"),
        ]

        for section_name, comment in sections:
            if section_name in config_dict:
                lines.append(f"# {comment}")
                section_yaml = yaml.dump({section_name: config_dict[section_name]},
                                         default_flow_style=False,
                                         sort_keys=False)
                lines.append(section_yaml.rstrip())
                lines.append("")

        return "\n".join(lines)

    def validate_config_file(self, config_path: Union[str, Path]) -> List[str]:
        """
        Validate a configuration file without raising.

        Args:
            config_path: Path to configuration file

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        config_path = Path(config_path)

        if not config_path.exists():
            errors.append(f"Configuration file not found: {config_path}")
            return errors

        try:
            self.load_config(config_path)
        except ConfigError as e:
            errors.append(str(e))

        return errors


def example_config() -> str:
    """Example configuration shown when no locations are defined."""
    return "\n".join([
        "locations:",
        "  home:",
        "    path: /home/user",
        "    mode: files",
        "  nas:",
        "    path: \\\\nas.local\\share",
        "    mode: folders",
        "    cache_file: .blink\\all-folders.txt",
    ])


def load_config(config_path: Optional[Union[str, Path]] = None) -> ConfigParseResult:
    """
    Convenience function to load configuration.

    Raises:
        ConfigError: If configuration is invalid
    """
    parser = ConfigParser()
    return parser.load_config(config_path)


def validate_config_file(config_path: Union[str, Path]) -> List[str]:
    """Convenience function to validate a configuration file."""
    parser = ConfigParser()
    return parser.validate_config_file(config_path)


def create_config_template(output_path: Union[str, Path]) -> None:
    """
    Create a template configuration file.

    Args:
        output_path: Where to save the template

    Raises:
        ConfigError: If template cannot be created
    """
    parser = ConfigParser()
    parser.save_config(BlinkConfig(), output_path)
