"""Cache/memory geometry.

Defaults reproduce the classic 512-word RAM with 8-word blocks in front of
a 4-set, 4-way cache. Every size must divide evenly:

  BLOCK_SIZE     divides RAM_SIZE
  CACHE_NUM_SETS divides RAM_SIZE // BLOCK_SIZE

so that every block maps to exactly one set and every (set, tag) pair maps
back to exactly one block.
"""
import json
from dataclasses import dataclass, asdict
from typing import Any, Dict

from .errors import ConfigurationError

RAM_SIZE = 512
BLOCK_SIZE = 8
CACHE_WAYS = 4
CACHE_NUM_SETS = 4


@dataclass(frozen=True)
class CacheConfig:
    ram_size: int = RAM_SIZE
    block_size: int = BLOCK_SIZE
    num_sets: int = CACHE_NUM_SETS
    num_ways: int = CACHE_WAYS

    def __post_init__(self):
        self.validate()

    @property
    def num_blocks(self) -> int:
        return self.ram_size // self.block_size

    @property
    def total_lines(self) -> int:
        return self.num_sets * self.num_ways

    def validate(self) -> None:
        for name in ("ram_size", "block_size", "num_sets", "num_ways"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an int, got {type(value).__name__}")
            if value < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {value}")
        if self.ram_size % self.block_size != 0:
            raise ConfigurationError(
                f"block_size {self.block_size} does not divide ram_size {self.ram_size}")
        if self.num_blocks % self.num_sets != 0:
            raise ConfigurationError(
                f"num_sets {self.num_sets} does not divide the {self.num_blocks} memory blocks")

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "CacheConfig":
        unknown = set(data) - {"ram_size", "block_size", "num_sets", "num_ways"}
        if unknown:
            raise ConfigurationError(f"unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> "CacheConfig":
        """Read a JSON object such as {"ram_size": 256, "num_ways": 2}.

        Missing keys keep their defaults.
        """
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            raise ConfigurationError(f"cannot read config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"config {path} must hold a JSON object")
        return cls.from_mapping(data)


__all__ = ["CacheConfig", "RAM_SIZE", "BLOCK_SIZE", "CACHE_WAYS", "CACHE_NUM_SETS"]
