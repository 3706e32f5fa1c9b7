"""Core cache implementation

This file provides the set-associative cache model used by the access engine.
Behavior:
- Cache is composed of sets; each set has `num_ways` ways.
  block_number = address // block_size
  offset = address % block_size
  set_index = block_number % num_sets
  tag = block_number // num_sets
- The same decode rule is used for every access, so an address always lands
  on the same (set, tag, offset) no matter which operation touched it.
- Replacement is FIFO by load time: `load_order` is stamped when a block is
  loaded and never refreshed on a hit.
"""

import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Tuple

from cachesim.core.config import CacheConfig
from cachesim.core.ram import RAM

logger = logging.getLogger(__name__)


class AddressParts(NamedTuple):
    block_number: int
    set_index: int
    tag: int
    offset: int


@dataclass
class CacheLine:
    """container for a cache line (way).

    Fields:
    - valid: whether the line currently holds useful data
    - tag: the tag stored in the line (-1 until first load)
    - block: copy of one aligned memory block (length = block_size)
    - load_order: stamp taken from the global load counter, used by FIFO
    """

    valid: bool = False
    tag: int = -1
    block: List[int] = field(default_factory=list)
    load_order: int = 0


class Cache:
    """Set-associative cache model with FIFO replacement.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or CacheConfig()
        self.block_size = self.config.block_size
        self.num_sets = self.config.num_sets
        self.num_ways = self.config.num_ways

        # allocate the sets matrix: num_sets x num_ways
        self.sets: List[List[CacheLine]] = [
            [CacheLine(block=[0] * self.block_size) for _ in range(self.num_ways)]
            for _ in range(self.num_sets)
        ]

    def decode(self, address: int) -> AddressParts:
        """Decode address into (block_number, set_index, tag, offset)."""
        block_number = address // self.block_size
        return AddressParts(
            block_number=block_number,
            set_index=block_number % self.num_sets,
            tag=block_number // self.num_sets,
            offset=address % self.block_size,
        )

    def compose(self, set_index: int, tag: int, offset: int = 0) -> int:
        """Inverse of decode: rebuild the address from its cache coordinates."""
        block_number = set_index + tag * self.num_sets
        return block_number * self.block_size + offset

    def probe(self, set_index: int, tag: int) -> Optional[int]:
        # wi = way-index
        for wi, line in enumerate(self.sets[set_index]):
            if line.valid and line.tag == tag:
                return wi
        return None

    def select_victim(self, set_index: int) -> int:
        cache_set = self.sets[set_index]
        # empty slots first
        for wi, line in enumerate(cache_set):
            if not line.valid:
                return wi
        # min() keeps the first of equal stamps, i.e. the lowest way index
        return min(range(len(cache_set)), key=lambda wi: cache_set[wi].load_order)

    def load_block(self, set_index: int, way: int, block_number: int, ram: RAM,
                   stamp: int) -> Optional[Tuple[int, int]]:
        """Copy one memory block into `sets[set_index][way]`.

        Returns (tag, block_number) of the line that was replaced, or None if
        the way was empty.
        """
        line = self.sets[set_index][way]
        evicted = None
        if line.valid:
            evicted = (line.tag, set_index + line.tag * self.num_sets)
            logger.debug("evicting tag %d (block %d) from set %d way %d",
                         evicted[0], evicted[1], set_index, way)

        line.block = ram.read_block(block_number * self.block_size, self.block_size)
        line.valid = True
        line.tag = block_number // self.num_sets
        line.load_order = stamp
        logger.debug("loaded block %d into set %d way %d (order %d)",
                     block_number, set_index, way, stamp)
        return evicted

    def line(self, set_index: int, way: int) -> CacheLine:
        return self.sets[set_index][way]

    def valid_lines(self) -> List[CacheLine]:
        return [line for s in self.sets for line in s if line.valid]

    def filled_lines(self) -> int:
        return len(self.valid_lines())

    @property
    def total_lines(self) -> int:
        return self.num_sets * self.num_ways

    def average_cached_value(self) -> float:
        words = [w for line in self.valid_lines() for w in line.block]
        if not words:
            return 0.0
        return sum(words) / len(words)

    def dump(self) -> List[Tuple[int, int, bool, int, List[int]]]:
        return [
            (si, wi, line.valid, line.tag, list(line.block))
            for si, cache_set in enumerate(self.sets)
            for wi, line in enumerate(cache_set)
        ]

    def reset(self):
        """Invalidate every line."""

        for s in self.sets:
            for line in s:
                line.valid = False
                line.tag = -1
                line.block = [0] * self.block_size
                line.load_order = 0
