from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "SYNESTHESIA_"
WINDOW_SIZE_ENV = f"{ENV_PREFIX}WINDOW_SIZE"
FPS_ENV = f"{ENV_PREFIX}FPS"
SAMPLE_RATE_ENV = f"{ENV_PREFIX}SAMPLE_RATE"
DISABLE_AUDIO_ENV = f"{ENV_PREFIX}DISABLE_AUDIO"
LOG_LEVEL_ENV = f"{ENV_PREFIX}LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class TrainerConfig:
    window_size: tuple[int, int] = (960, 540)
    target_fps: int = 60
    sample_rate: int = 44100
    audio_enabled: bool = True
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        w, h = self.window_size
        if w <= 0 or h <= 0:
            raise ValueError("window_size must be positive")
        if self.target_fps <= 0:
            raise ValueError("target_fps must be > 0")
        if self.sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

    @property
    def logging_level(self) -> int:
        return int(getattr(logging, self.log_level))


def _parse_window_size(raw: str) -> tuple[int, int]:
    parts = raw.lower().replace(" ", "").split("x")
    if len(parts) != 2:
        raise ValueError(f"{WINDOW_SIZE_ENV} must look like 960x540, got {raw!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"{WINDOW_SIZE_ENV} must look like 960x540, got {raw!r}") from None


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_config(environ: Mapping[str, str] | None = None) -> TrainerConfig:
    """Build a TrainerConfig from ``SYNESTHESIA_*`` environment variables."""

    env = os.environ if environ is None else environ
    defaults = TrainerConfig()

    window_size = defaults.window_size
    raw = env.get(WINDOW_SIZE_ENV, "").strip()
    if raw:
        window_size = _parse_window_size(raw)

    target_fps = defaults.target_fps
    raw = env.get(FPS_ENV, "").strip()
    if raw:
        target_fps = _parse_int(FPS_ENV, raw)

    sample_rate = defaults.sample_rate
    raw = env.get(SAMPLE_RATE_ENV, "").strip()
    if raw:
        sample_rate = _parse_int(SAMPLE_RATE_ENV, raw)

    audio_enabled = env.get(DISABLE_AUDIO_ENV, "0").strip() != "1"
    log_level = env.get(LOG_LEVEL_ENV, "").strip().upper() or defaults.log_level

    return TrainerConfig(
        window_size=window_size,
        target_fps=target_fps,
        sample_rate=sample_rate,
        audio_enabled=audio_enabled,
        log_level=log_level,
    )
