"""Configuration loading and management for zombie-detector.

Configuration sources are merged in priority order:
    1. Defaults (defined in DetectorConfig)
    2. Global config (~/.zombie-detector.toml)
    3. Project config (./zombie-detector.toml)
    4. Explicit config file
    5. Environment variables (ZOMBIE_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(include_tests=False)
    >>> config.include_tests
    False
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError, ZombieDetectorError

Verbosity = Literal["quiet", "normal", "verbose"]

GLOBAL_CONFIG_NAME = ".zombie-detector.toml"
PROJECT_CONFIG_NAME = "zombie-detector.toml"
ENV_PREFIX = "ZOMBIE_"


@dataclass(frozen=True)
class DetectorConfig:
    """Configuration for one analysis run.

    Attributes:
        Entry points:
            include_tests: Treat files under test directories as entry points
            front_controller_names: File names that are always entry points
            public_dirs: Web-root directories (first path segment)
            cli_dirs: CLI script directories (first path segment)
            test_dirs: Test directory names (any directory segment)
            include_root_files: Files directly in the project root are entry points
            entry_point_globs: Extra glob patterns (project-relative) for entry files

        File collection:
            vendor_dirs: Directory names holding third-party code (case-insensitive)
            extensions: Source file extensions to analyze
            exclude_patterns: Glob patterns (project-relative) to skip
            max_file_size_mb: Files larger than this are skipped
            follow_symlinks: Follow symbolic links while walking the project

        Output control:
            report_magic_methods: Report methods starting with "__" as findings
            verbosity: Logging verbosity level
    """

    # Entry points
    include_tests: bool = True
    front_controller_names: list[str] = field(default_factory=lambda: ["index.php"])
    public_dirs: list[str] = field(default_factory=lambda: ["public"])
    cli_dirs: list[str] = field(default_factory=lambda: ["bin"])
    test_dirs: list[str] = field(default_factory=lambda: ["tests", "test"])
    include_root_files: bool = True
    entry_point_globs: list[str] = field(default_factory=list)

    # File collection
    vendor_dirs: list[str] = field(default_factory=lambda: ["vendor"])
    extensions: list[str] = field(default_factory=lambda: [".php"])
    exclude_patterns: list[str] = field(
        default_factory=lambda: [
            "node_modules/*",
            "var/cache/*",
            "storage/framework/*",
            "*.blade.php",
        ]
    )
    max_file_size_mb: float = 5.0
    follow_symlinks: bool = False

    # Output control
    report_magic_methods: bool = False
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")
        if not self.extensions:
            raise InvalidConfigError("extensions", self.extensions, "at least one extension required")
        for ext in self.extensions:
            if not ext.startswith("."):
                raise InvalidConfigError("extensions", ext, "extensions must start with '.'")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected one of quiet, normal, verbose"
            )
        for key in ("public_dirs", "cli_dirs", "test_dirs", "vendor_dirs"):
            for name in getattr(self, key):
                if not name or "/" in name.strip("/"):
                    raise InvalidConfigError(key, name, "expected a single directory name")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


DEFAULT_CONFIG = DetectorConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> DetectorConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated DetectorConfig instance

    Raises:
        ZombieDetectorError: If a config file is invalid or missing
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / GLOBAL_CONFIG_NAME
    if global_config.exists():
        merged.update(_read_config_file(global_config, "global config"))

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        merged.update(_read_config_file(project_config, "project config"))

    if config_file is not None:
        if not config_file.exists():
            raise ZombieDetectorError(f"Config file not found: {config_file}")
        merged.update(_read_config_file(config_file, "config file"))

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return DetectorConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ZombieDetectorError(f"Invalid configuration: {e}")


def _read_config_file(path: Path, label: str) -> dict[str, Any]:
    """Read one TOML file, accepting either top-level keys or a [zombie-detector] table."""
    try:
        data = _load_toml_file(path)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ZombieDetectorError(f"Invalid {label} '{path}': {e}")
    section = data.get("zombie-detector")
    if isinstance(section, dict):
        return dict(section)
    return data


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ZOMBIE_* environment variables.

    Supported environment variables:
        ZOMBIE_INCLUDE_TESTS: bool (true/false/1/0)
        ZOMBIE_INCLUDE_ROOT_FILES: bool
        ZOMBIE_MAX_FILE_SIZE_MB: float
        ZOMBIE_FOLLOW_SYMLINKS: bool
        ZOMBIE_REPORT_MAGIC_METHODS: bool
        ZOMBIE_VERBOSITY: quiet/normal/verbose

    List-valued fields are not read from the environment.

    Returns:
        Dict of field_name -> parsed_value for any ZOMBIE_* vars found.
    """
    type_hints = get_type_hints(DetectorConfig)

    result: dict[str, Any] = {}

    for field_name in DetectorConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise ZombieDetectorError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value or None if the field type is not settable from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Handle Optional[X] which is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    # Bool: accept true/false/1/0/yes/no
    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    with open(path, "rb") as f:
        return tomllib.load(f)
