"""Address stream generators.

Each generator yields plain integer addresses; feed them to
CacheSystem.read (or CacheSystem.run). Random generators take a
`random.Random` so runs can be reproduced with a seed.
"""
import random
from typing import Iterator, Optional


def sequential(start: int, count: int, ram_size: int) -> Iterator[int]:
    # addresses that run past the end of RAM are skipped
    for addr in range(start, start + count):
        if 0 <= addr < ram_size:
            yield addr


def random_addresses(count: int, ram_size: int, rng: Optional[random.Random] = None) -> Iterator[int]:
    rng = rng or random.Random()
    for _ in range(count):
        yield rng.randrange(ram_size)


def local_regions(requests: int, locality_range: int, regions: int, ram_size: int,
                  rng: Optional[random.Random] = None, on_region=None) -> Iterator[int]:
    """Clustered traffic: `regions` windows of `locality_range` words each,
    with `requests` random addresses drawn inside every window.

    `on_region(index, start)` is called as each window is chosen.
    """
    if locality_range < 1 or locality_range >= ram_size:
        raise ValueError(f"locality range must be in [1, {ram_size - 1}], got {locality_range}")
    rng = rng or random.Random()
    for region in range(regions):
        start = rng.randrange(ram_size - locality_range)
        if on_region:
            on_region(region, start)
        for _ in range(requests):
            yield start + rng.randrange(locality_range)


__all__ = ["sequential", "random_addresses", "local_regions"]
