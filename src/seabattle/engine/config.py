"""Game configuration."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

FirstMover = Literal["random", "human", "automated"]


class GameConfig(BaseModel):
    """Tunables for a match. The board is always 10×10."""

    rng_seed: int | None = None
    max_placement_attempts: int = Field(default=5000, gt=0)
    max_target_attempts: int = Field(default=1000, gt=0)
    first_mover: FirstMover = "random"

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from ``SEABATTLE_*`` env vars; overrides win."""

        data: Dict[str, Any] = {}
        env_fields = {
            "rng_seed": "SEABATTLE_RNG_SEED",
            "max_placement_attempts": "SEABATTLE_MAX_PLACEMENT_ATTEMPTS",
            "max_target_attempts": "SEABATTLE_MAX_TARGET_ATTEMPTS",
            "first_mover": "SEABATTLE_FIRST_MOVER",
        }
        for field, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[field] = value.strip().lower()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    """Load and cache game config from the environment."""

    return GameConfig.from_env()
