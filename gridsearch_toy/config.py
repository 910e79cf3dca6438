"""
Configuration models for the grid search demo and benchmark.

Configs are validated with pydantic and may be loaded from YAML:

    grid:
      width: 20
      height: 12
      block_fraction: 0.3
      seed: 7
    search:
      strategy: astar
      step_delay: 0.02
    log_level: INFO
"""

from pathlib import Path
from typing import Optional

import yaml
from grid import Grid
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from search_engine import Strategy


class GridConfig(BaseModel):
    """Grid size and contents."""

    width: int = Field(10, gt=0, description="Number of columns")
    height: int = Field(10, gt=0, description="Number of rows")
    block_fraction: float = Field(0.0, ge=0.0, lt=1.0, description="Chance a random cell is blocked")
    seed: Optional[int] = Field(None, description="Seed for random grids")
    layout: Optional[str] = Field(None, description="Text layout ('.', '#', 'S', 'E'); overrides width/height")

    @model_validator(mode="after")
    def match_layout_size(self) -> "GridConfig":
        if self.layout is not None:
            rows = [row.strip() for row in self.layout.splitlines() if row.strip()]
            if not rows:
                raise ValueError("layout must contain at least one row")
            self.width = len(rows[0])
            self.height = len(rows)
        return self


class SearchConfig(BaseModel):
    """Search strategy and pacing."""

    strategy: Strategy = Field(Strategy.BFS, description="bfs or astar")
    step_delay: float = Field(0.0, ge=0.0, description="Seconds to wait between events when animating")

    @field_validator("strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, v):
        if isinstance(v, str):
            v = v.strip().lower().replace("*", "star").replace("-", "")
        return v


class AppConfig(BaseModel):
    grid: GridConfig = Field(default_factory=GridConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    log_level: str = Field("INFO", description="loguru level name")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return v


def load_config(config_path: Path) -> AppConfig:
    """
    Load and validate an AppConfig from a YAML file.

    Raises
    ------
    FileNotFoundError
        The file does not exist.
    yaml.YAMLError
        The file is not valid YAML.
    ValueError
        The file is empty.
    pydantic.ValidationError
        The contents do not match AppConfig.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        error_msg = f"Config file not found: {config_path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {config_path}: {e}")
        raise

    if raw_config is None:
        error_msg = f"Config file is empty: {config_path}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    try:
        config = AppConfig.model_validate(raw_config)
    except ValidationError as e:
        logger.error(f"Config validation failed for {config_path}:")
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            logger.error(f"  {field_path}: {error['msg']}")
        raise

    logger.info(f"Loaded config: {config_path}")
    return config


def build_grid(config: GridConfig) -> Grid:
    """
    Create the grid a GridConfig describes: the text layout if given,
    otherwise a (possibly random) width x height grid.
    """
    if config.layout is not None:
        return Grid.from_text(config.layout)
    if config.block_fraction > 0:
        return Grid.random_grid(
            config.width,
            config.height,
            block_fraction=config.block_fraction,
            seed=config.seed,
        )
    return Grid(config.width, config.height)
