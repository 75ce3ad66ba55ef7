# primegen/config.py
# Environment driven settings for the CLI and the HTTP API

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .search import DEFAULT_MAX_ITERATIONS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    rounds: int = 10
    workers: int = 1
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS
    max_bits: int = 4096
    max_rounds: int = 1000
    max_workers: int = 64
    log_level: str = "WARNING"
    host: str = "127.0.0.1"
    port: int = 8082


def _int_env(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value

def load_config(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    level = (env.get("PRIMEGEN_LOG_LEVEL") or "WARNING").strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"PRIMEGEN_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    # 0 turns the search budget off
    max_iterations = _int_env(env, "PRIMEGEN_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS)
    return Settings(
        rounds=_int_env(env, "PRIMEGEN_ROUNDS", 10),
        workers=_int_env(env, "PRIMEGEN_WORKERS", os.cpu_count() or 1, minimum=1),
        max_iterations=max_iterations or None,
        max_bits=_int_env(env, "PRIMEGEN_MAX_BITS", 4096, minimum=2),
        max_rounds=_int_env(env, "PRIMEGEN_MAX_ROUNDS", 1000, minimum=1),
        max_workers=_int_env(env, "PRIMEGEN_MAX_WORKERS", 64, minimum=1),
        log_level=level,
        host=(env.get("PRIMEGEN_HOST") or "127.0.0.1").strip(),
        port=_int_env(env, "PRIMEGEN_PORT", 8082, minimum=1),
    )
