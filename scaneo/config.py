"""
Configuration management for scaneo.

Handles loading and merging configuration from JSON files and command line
overrides, providing defaults for every setting.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .gotypes import DEFAULT_IMPORT_PATHS


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class ScaneoConfig:
    """Settings for one scaneo run."""

    # Output settings
    output_file: str = "scans.go"
    package_name: Optional[str] = None  # None: derived from the working directory

    # Generation settings
    unexport: bool = False
    whitelist: List[str] = field(default_factory=list)
    template: str = "scans"
    template_dir: Optional[str] = None
    validate_output: bool = True

    # Package qualifier -> import path for the fixture template
    import_paths: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_IMPORT_PATHS)
    )

    # Unknown keys from config files
    custom: Dict[str, Any] = field(default_factory=dict)


class ConfigManager:
    """Manages configuration loading and merging."""

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> ScaneoConfig:
        """
        Build a configuration from defaults, a file and overrides.

        Args:
            custom_config: Overrides applied last
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        merged: Dict[str, Any] = {}

        if config_file:
            merged.update(self._load_config_file(config_file))

        if custom_config:
            merged.update({k: v for k, v in custom_config.items() if v is not None})

        return self._dict_to_config(merged)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file {path}: {e}"
            ) from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> ScaneoConfig:
        """Convert dictionary to ScaneoConfig instance."""
        known_fields = {f.name for f in fields(ScaneoConfig)}

        config_args: Dict[str, Any] = {}
        custom_args: Dict[str, Any] = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get("custom") or {})
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        whitelist = config_args.get("whitelist")
        if isinstance(whitelist, str):
            config_args["whitelist"] = split_names(whitelist)
        elif whitelist is not None and not isinstance(whitelist, list):
            raise ConfigError(f"whitelist must be a list or string, got {whitelist!r}")

        import_paths = config_args.get("import_paths")
        if import_paths is not None:
            if not isinstance(import_paths, dict):
                raise ConfigError(f"import_paths must be an object, got {import_paths!r}")
            config_args["import_paths"] = {**DEFAULT_IMPORT_PATHS, **import_paths}

        return ScaneoConfig(**config_args)

    def save_config(self, config: ScaneoConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        config_dict.update(config_dict.pop("custom"))

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e


def split_names(value: str) -> List[str]:
    """Split a comma separated name list, dropping blanks."""
    return [name.strip() for name in value.split(",") if name.strip()]


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> ScaneoConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    return get_config_manager().get_config(custom_config, config_file)


def save_config(config: ScaneoConfig, output_path: Union[str, Path]):
    """Write ``config`` as JSON to ``output_path``."""
    get_config_manager().save_config(config, output_path)
