"""Path constants and configuration loading.

The run is configured by a YAML file (``weightdrift.yaml``) listing the
pallets to benchmark and where their dispatch files live, plus the drift
threshold and retry count. Auto-patching is gated by the
``AUTO_COMMIT_WEIGHTS`` environment variable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from weightdrift.domain.errors import ConfigurationError
from weightdrift.domain.models import (
    BenchmarkSettings,
    GitSettings,
    Pallet,
    PatchPolicy,
    RunConfig,
)

CONFIG_FILE = "weightdrift.yaml"
STATE_DIR = ".weightdrift"
LOG_FILE = "weightdrift.log"

AUTO_COMMIT_ENV = "AUTO_COMMIT_WEIGHTS"

DEFAULT_THRESHOLD = 15
DEFAULT_MAX_RETRIES = 3


def config_file(project_root: Path) -> Path:
    """Return the default config file path."""
    return project_root / CONFIG_FILE


def log_file(project_root: Path) -> Path:
    """Return the default audit log path."""
    return project_root / STATE_DIR / LOG_FILE


def auto_commit_enabled(environ: dict[str, str] | None = None) -> bool:
    """True when ``AUTO_COMMIT_WEIGHTS=1``."""
    env = os.environ if environ is None else environ
    return env.get(AUTO_COMMIT_ENV, "0") == "1"


def load_config(path: Path, environ: dict[str, str] | None = None) -> RunConfig:
    """Load and validate the run configuration at *path*.

    Relative paths in the file are resolved against its directory.

    Raises:
        ConfigurationError: The file is missing, not valid YAML, or has
            fields of the wrong shape.
    """
    if not path.exists():
        raise ConfigurationError(f"config file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return parse_config(raw, path.parent.resolve(), environ)


def parse_config(
    raw: dict[str, Any], root: Path, environ: dict[str, str] | None = None
) -> RunConfig:
    """Build a RunConfig from an already-parsed mapping."""
    pallets = raw.get("pallets", [])
    if not isinstance(pallets, list) or not all(isinstance(p, str) for p in pallets):
        raise ConfigurationError("'pallets' must be a list of names")

    dispatch_raw = _mapping(raw, "dispatch_paths")
    modules = {str(k): str(v) for k, v in _mapping(raw, "modules").items()}

    try:
        policy = PatchPolicy(raw.get("patch_policy", PatchPolicy.STOP.value))
    except ValueError as exc:
        raise ConfigurationError(
            f"unknown patch_policy {raw.get('patch_policy')!r} (expected 'stop' or 'reverify')"
        ) from exc

    bench = _mapping(raw, "benchmark")
    defaults = BenchmarkSettings()
    benchmark = BenchmarkSettings(
        binary=str(bench.get("binary", defaults.binary)),
        runtime=str(bench.get("runtime", defaults.runtime)),
        genesis_preset=str(bench.get("genesis_preset", defaults.genesis_preset)),
        wasm_execution=str(bench.get("wasm_execution", defaults.wasm_execution)),
        steps=_int(bench, "steps", defaults.steps),
        repeat=_int(bench, "repeat", defaults.repeat),
    )

    build = _mapping(raw, "build")
    command = build.get("command", [])
    if isinstance(command, str):
        command = command.split()
    if not isinstance(command, list):
        raise ConfigurationError("'build.command' must be a list of arguments")

    git_raw = _mapping(raw, "git")
    git_defaults = GitSettings()
    git = GitSettings(
        remote=str(git_raw.get("remote", git_defaults.remote)),
        user_name=str(git_raw.get("user_name", git_defaults.user_name)),
        user_email=str(git_raw.get("user_email", git_defaults.user_email)),
        commit_message=str(git_raw.get("commit_message", git_defaults.commit_message)),
    )

    return RunConfig(
        root=root,
        pallets=tuple(pallets),
        dispatch_paths={str(k): root / str(v) for k, v in dispatch_raw.items()},
        modules=modules,
        threshold=_int(raw, "threshold", DEFAULT_THRESHOLD),
        max_retries=max(1, _int(raw, "max_retries", DEFAULT_MAX_RETRIES)),
        auto_commit=auto_commit_enabled(environ),
        patch_policy=policy,
        benchmark=benchmark,
        build_command=tuple(str(arg) for arg in command),
        git=git,
    )


def resolve_pallet(config: RunConfig, name: str) -> Pallet:
    """Return the Pallet for *name*, checking its mapping and file.

    Raises:
        ConfigurationError: No dispatch path is configured for *name*, or
            the file it points to does not exist.
    """
    path = config.dispatch_paths.get(name)
    if path is None:
        raise ConfigurationError(f"no dispatch path configured for pallet '{name}'")
    if not path.is_file():
        raise ConfigurationError(f"dispatch file missing: {path}")
    return Pallet(name=name, dispatch_path=path, module=config.modules.get(name, ""))


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a mapping")
    return value


def _int(raw: dict[str, Any], key: str, default: int) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"'{key}' must be an integer, got {value!r}")
    return value
