"""
Configuration - Engine, shop and logging settings.

Settings are plain pydantic models passed explicitly into Roster, Shop,
EventEngine and Battle constructors. Nothing here is a process-wide
mutable default; every caller gets its own instance.

File format (``.saptest.toml`` in the working directory, or the path in
``SAPTEST_CONFIG``)::

    [engine]
    max_turns = 50
    cascade_limit = 1000

    [shop]
    start_gold = 10
    refund_fraction = 0.3333

    [logging]
    level = "DEBUG"
"""

from __future__ import annotations
from fractions import Fraction
from pathlib import Path
import os
import tomllib

from pydantic import BaseModel, Field, field_validator


SAPTEST_ENV = os.getenv("SAPTEST_ENV", "development")
CONFIG_FILENAME = ".saptest.toml"


class EngineConfig(BaseModel):
    """Battle and cascade limits."""
    max_stat: int = Field(default=50, ge=1, description="Ceiling for attack and health")
    min_damage: int = Field(default=1, ge=0)
    max_damage: int = Field(default=150, ge=1)
    cascade_limit: int = Field(default=1000, ge=1, description="Max events processed per queue drain")
    max_turns: int = Field(default=100, ge=1, description="Turn ceiling before a forced draw")
    roster_capacity: int = Field(default=5, ge=1)
    max_level: int = Field(default=3, ge=1)
    # Cumulative experience needed to leave level 1, level 2, ...
    experience_thresholds: tuple[int, ...] = (2, 5)

    model_config = {"frozen": True}

    def experience_for_level(self, level: int) -> int | None:
        """Experience needed to level up from ``level``; None at max level."""
        if level >= self.max_level or level - 1 >= len(self.experience_thresholds):
            return None
        return self.experience_thresholds[level - 1]


class ShopConfig(BaseModel):
    """Economy constants."""
    start_gold: int = Field(default=10, ge=0)
    roll_cost: int = Field(default=1, ge=0)
    refund_fraction: float = Field(default=1 / 3, ge=0, le=1, description="Share of cost refunded per level on sell")
    merge_keep_max: bool = Field(default=True, description="Merged pet keeps the higher attack/health of the two")
    merge_stat_bonus: tuple[int, int] = (1, 1)
    max_tier: int = Field(default=6, ge=1)
    pack: str = "Turtle"

    model_config = {"frozen": True}

    @field_validator("refund_fraction")
    @classmethod
    def _round_fraction(cls, value: float) -> float:
        return float(Fraction(value).limit_denominator(100))

    def refund_for(self, cost: int, level: int) -> int:
        """Coins returned when selling a pet of the given cost and level."""
        per_level = int(Fraction(cost) * Fraction(self.refund_fraction).limit_denominator(100))
        return per_level * level


class Settings(BaseModel):
    """Top level settings object."""
    engine: EngineConfig = Field(default_factory=EngineConfig)
    shop: ShopConfig = Field(default_factory=ShopConfig)
    log_level: str = "INFO"


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load settings from a TOML file.

    Lookup order: explicit ``path``, ``$SAPTEST_CONFIG``, ``./.saptest.toml``.
    A missing file yields the defaults. ``$SAPTEST_LOG_LEVEL`` overrides the
    file's log level.
    """
    if path is None:
        path = os.getenv("SAPTEST_CONFIG") or CONFIG_FILENAME
    path = Path(path)

    data: dict = {}
    if path.is_file():
        with path.open("rb") as f:
            data = tomllib.load(f)

    settings = Settings(
        engine=EngineConfig(**data.get("engine", {})),
        shop=ShopConfig(**data.get("shop", {})),
        log_level=data.get("logging", {}).get("level", "INFO"),
    )

    env_level = os.getenv("SAPTEST_LOG_LEVEL")
    if env_level:
        settings = settings.model_copy(update={"log_level": env_level.upper()})
    return settings
