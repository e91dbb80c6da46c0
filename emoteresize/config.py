"""
Runtime configuration.

``PipelineConfig`` aggregates the per-stage option objects.  Worker
count and a few tuning knobs can be overridden from the environment so
the CLI and library share one place that reads it.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Mapping

from emoteresize.encoder import GifConfig
from emoteresize.processing import OutlineConfig
from emoteresize.resample import ResizeOptions

ENV_WORKERS = "EMOTERESIZE_WORKERS"
ENV_GIF_QUALITY = "EMOTERESIZE_GIF_QUALITY"
ENV_STATIC_QUALITY = "EMOTERESIZE_STATIC_QUALITY"


@dataclass
class PipelineConfig:
    """Full configuration for a batch."""
    max_workers: int = 0          # 0 = auto-detect from CPU count
    gif: GifConfig = field(default_factory=GifConfig)
    outline: OutlineConfig = field(default_factory=OutlineConfig)
    static_resize: ResizeOptions = field(default_factory=ResizeOptions)   # alpha is set per source
    static_quality: int = 92      # JPEG / WebP quality, 1 -- 100
    show_progress: bool = False


def resolve_worker_count(config: PipelineConfig) -> int:
    """Determine how many parallel workers to use."""
    if config.max_workers > 0:
        return config.max_workers
    cpu = os.cpu_count() or 2
    return max(1, cpu - 1)


def _int_from_env(env: Mapping[str, str], name: str, minimum: int, maximum: int) -> int | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if not minimum <= value <= maximum:
        raise ValueError(f"{name} must be between {minimum} and {maximum}, got {value}")
    return value


def config_from_env(
    base: PipelineConfig | None = None,
    env: Mapping[str, str] | None = None,
) -> PipelineConfig:
    """Return a copy of *base* with environment overrides applied."""
    env = os.environ if env is None else env
    config = dataclasses.replace(base) if base is not None else PipelineConfig()

    workers = _int_from_env(env, ENV_WORKERS, 0, 256)
    if workers is not None:
        config.max_workers = workers

    gif_quality = _int_from_env(env, ENV_GIF_QUALITY, 1, 30)
    if gif_quality is not None:
        config.gif = dataclasses.replace(config.gif, quality=gif_quality)

    static_quality = _int_from_env(env, ENV_STATIC_QUALITY, 1, 100)
    if static_quality is not None:
        config.static_quality = static_quality

    return config
