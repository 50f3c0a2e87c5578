"""
Configuration loader with deep merge.

Precedence (lowest to highest):
1. Defaults (defined in the Pydantic schemas)
2. YAML file
3. Environment variables
4. CLI arguments

The merge is recursive so every key survives at every level.
"""

import os
from pathlib import Path
from typing import Any

import yaml

from .schema import AppConfig


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dictionary merge.

    Args:
        base: Base dictionary
        override: Dictionary whose values win

    Returns:
        New merged dictionary. Override wins on leaf conflicts.

    Example:
        >>> deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"b": 99}, "e": 4})
        {'a': {'b': 99, 'c': 2}, 'e': 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None to skip

    Returns:
        Configuration dictionary, empty if there is no file

    Raises:
        FileNotFoundError: If config_path is given but does not exist
    """
    if not config_path:
        return {}

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def load_env_overrides() -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        LINGORA_LOCALE: overrides locale
        LINGORA_FALLBACK: overrides fallback
        LINGORA_MESSAGES_DIR: overrides messages_dir
        LINGORA_REMOTE_URL: overrides remote.base_url
        LINGORA_CACHE_TTL_MS: overrides cache.ttl_ms
        LINGORA_LOG_LEVEL: overrides logging.level

    Returns:
        Dictionary of overrides
    """
    overrides: dict[str, Any] = {}

    if locale := os.environ.get("LINGORA_LOCALE"):
        overrides["locale"] = locale

    if fallback := os.environ.get("LINGORA_FALLBACK"):
        overrides["fallback"] = fallback

    if messages_dir := os.environ.get("LINGORA_MESSAGES_DIR"):
        overrides["messages_dir"] = messages_dir

    if remote_url := os.environ.get("LINGORA_REMOTE_URL"):
        overrides.setdefault("remote", {})["base_url"] = remote_url

    if ttl := os.environ.get("LINGORA_CACHE_TTL_MS"):
        overrides.setdefault("cache", {})["ttl_ms"] = ttl

    if log_level := os.environ.get("LINGORA_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    return overrides


def apply_cli_overrides(config_dict: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Apply overrides from CLI arguments.

    Args:
        config_dict: Base configuration (already merged with YAML and env)
        cli_args: CLI argument dictionary

    Returns:
        Configuration with CLI overrides applied
    """
    overrides: dict[str, Any] = {}

    if cli_args.get("locale"):
        overrides["locale"] = cli_args["locale"]

    if cli_args.get("fallback"):
        overrides["fallback"] = cli_args["fallback"]

    # A source given on the command line replaces whichever one the file set
    if cli_args.get("messages_dir"):
        overrides["messages_dir"] = cli_args["messages_dir"]
        config_dict = {k: v for k, v in config_dict.items() if k != "remote"}

    if cli_args.get("remote_url"):
        overrides.setdefault("remote", {})["base_url"] = cli_args["remote_url"]
        config_dict = {k: v for k, v in config_dict.items() if k != "messages_dir"}

    if cli_args.get("log_file"):
        overrides.setdefault("logging", {})["file"] = cli_args["log_file"]

    if cli_args.get("verbose"):
        overrides.setdefault("logging", {})["verbose"] = cli_args["verbose"]

    return deep_merge(config_dict, overrides)


def load_config(
    config_path: Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> AppConfig:
    """Load and validate the complete configuration.

    Args:
        config_path: Path to the YAML configuration file
        cli_args: CLI argument dictionary

    Returns:
        Validated AppConfig

    Raises:
        FileNotFoundError: If config_path does not exist
        ValidationError: If the final configuration is invalid
    """
    cli_args = cli_args or {}

    yaml_config = load_yaml_config(config_path)
    merged = deep_merge(yaml_config, load_env_overrides())
    merged = apply_cli_overrides(merged, cli_args)

    # Pydantic applies the defaults
    return AppConfig(**merged)
