"""
Startup configuration.

Settings are resolved once, lowest priority first:
1. Model defaults
2. Optional YAML file given with --config
3. PKGMIRROR_* environment variables
4. Command-line options
"""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError

from pkgmirror.domain.errors import ConfigError
from pkgmirror.domain.models import MirrorSettings, parse_bind_address

ENV_PREFIX = "PKGMIRROR_"
ENV_FIELDS = ("repo_dir", "bind_address", "github_repo", "log_level", "sync_interval")

_LOG_LEVELS = {
    1: logging.DEBUG,
    2: logging.INFO,
    3: logging.WARNING,
    4: logging.ERROR,
}


def log_level_from_verbosity(verbosity: int) -> int:
    """Map the 1-4 verbosity option to a logging level (INFO for anything else)."""
    return _LOG_LEVELS.get(verbosity, logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pkgmirror",
        description="Mirror pacman packages from the newest GitHub release and serve them over HTTP.",
    )
    parser.add_argument("-d", "--repo-dir", help="Repository directory")
    parser.add_argument("-b", "--bind-address", help="HTTP bind address, e.g. 0.0.0.0:8080")
    parser.add_argument("-g", "--github-repo", help="GitHub repository as owner/repo")
    parser.add_argument("--log-level", type=int, help="1=debug 2=info 3=warning 4=error (default 3)")
    parser.add_argument("--sync-interval", type=float, help="Seconds to wait around each sync (default 30)")
    parser.add_argument("-c", "--config", type=Path, help="YAML settings file")
    return parser


def load_config_file(path: Path) -> Dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    # Accept both repo_dir and repo-dir spellings.
    return {str(k).replace("-", "_"): v for k, v in raw.items()}


def settings_from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field in ENV_FIELDS:
        value = environ.get(ENV_PREFIX + field.upper())
        if value:
            values[field] = value
    return values


def resolve_settings(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MirrorSettings:
    """
    Build the process settings from config file, environment and arguments.

    Missing required values exit through argparse's usage error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    environ = os.environ if environ is None else environ

    values: Dict[str, Any] = {}
    if args.config is not None:
        try:
            values.update(load_config_file(args.config))
        except ConfigError as e:
            parser.error(str(e))
    values.update(settings_from_env(environ))
    for field in ENV_FIELDS:
        value = getattr(args, field)
        if value is not None:
            values[field] = value

    missing = [f for f in ("repo_dir", "bind_address", "github_repo") if not values.get(f)]
    if missing:
        options = ", ".join("--" + f.replace("_", "-") for f in missing)
        parser.error(f"missing required settings: {options}")

    try:
        settings = MirrorSettings(**values)
        parse_bind_address(settings.bind_address)
    except (ValidationError, ValueError) as e:
        parser.error(str(e))
    return settings
