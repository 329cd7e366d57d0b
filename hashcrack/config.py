"""
Configuration for the hash cracker.

Precedence, lowest first: dataclass defaults, YAML file, HASHCRACK_* environment
variables, explicit overrides (CLI flags).

Example YAML:

    algorithm: sha256
    workers: 4
    chunk_size: 2048
    progress_interval: 2.0
    count_total: true
    timeout: 600
    log_level: INFO
"""
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

import yaml

from hashcrack.digest import SUPPORTED_ALGOS

CONFIG_ENV = "HASHCRACK_CONFIG"

ENV_KEYS = {
    "HASHCRACK_ALGO": "algorithm",
    "HASHCRACK_WORKERS": "workers",
    "HASHCRACK_TIMEOUT": "timeout",
    "HASHCRACK_LOG_LEVEL": "log_level",
}


@dataclass
class CrackerConfig:
    algorithm: Optional[str] = None
    workers: int = 1
    chunk_size: int = 1024
    progress_interval: float = 1.0
    count_total: bool = False
    timeout: Optional[float] = None
    log_level: str = "INFO"

    def validate(self) -> "CrackerConfig":
        if self.algorithm is not None and self.algorithm.lower() not in SUPPORTED_ALGOS:
            raise ValueError(f"Unsupported algorithm in config: {self.algorithm}")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.progress_interval < 0:
            raise ValueError("progress_interval must be >= 0")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        return self

    def merged(self, overrides: Mapping[str, Any]) -> "CrackerConfig":
        """Return a copy with non-None overrides applied and coerced."""
        known = {f.name: f for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                raise ValueError(f"Unknown config key: {key}")
            if value is None:
                continue
            changes[key] = _coerce(key, value)
        return replace(self, **changes).validate()


def _coerce(key: str, value: Any) -> Any:
    try:
        if key in ("workers", "chunk_size"):
            return int(value)
        if key in ("progress_interval", "timeout"):
            return float(value)
        if key == "count_total":
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        return str(value)
    except (TypeError, ValueError) as ex:
        raise ValueError(f"Invalid value for {key}: {value!r}") from ex


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as ex:
            raise ValueError(f"Config file {path} is not valid YAML: {ex}") from ex
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    env = os.environ if environ is None else environ
    return {key: env[var] for var, key in ENV_KEYS.items() if env.get(var)}


def load_config(path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None,
                environ: Optional[Mapping[str, str]] = None) -> CrackerConfig:
    env = os.environ if environ is None else environ
    cfg = CrackerConfig()
    path = path or env.get(CONFIG_ENV)
    if path:
        cfg = cfg.merged(load_yaml(path))
    cfg = cfg.merged(env_overrides(env))
    if overrides:
        cfg = cfg.merged(overrides)
    return cfg.validate()
