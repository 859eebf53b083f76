"""Replay runtime configuration."""
import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

DEFAULT_ROUND_INTERVAL_S = 2.0
MIN_ROUND_INTERVAL_S = 0.05
MAX_ROUND_INTERVAL_S = 60.0

ENV_PREFIX = "BATTLE_REPLAY_"

class ReplaySettings(BaseModel):
    """Settings read from BATTLE_REPLAY_* environment variables."""
    game_data_path: Optional[str] = None
    map_path: Optional[str] = None
    round_interval_s: float = Field(default=DEFAULT_ROUND_INTERVAL_S, gt=0)
    log_level: str = "INFO"

def load_settings(environ: Optional[Mapping[str, str]] = None) -> ReplaySettings:
    env = os.environ if environ is None else environ
    values = {}
    for name in ReplaySettings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in env:
            values[name] = env[key]
    return ReplaySettings(**values)

def clamp_interval(interval_s: float) -> float:
    return max(MIN_ROUND_INTERVAL_S, min(MAX_ROUND_INTERVAL_S, interval_s))

def configure_logging(level: str = "INFO") -> None:
    """Install a basic stderr handler once; later calls only change the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root.setLevel(level.upper())
