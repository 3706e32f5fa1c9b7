"""Simulation wrapper used by the menu

Turns a named traffic scenario into a sequence of addresses and forwards
them to the cache system.
"""
import random
from typing import Dict, List, Optional

from cachesim.core.simulator import CacheSystem
from cachesim.simulation import traffic

SCENARIOS = ('Sequential', 'Random Access', 'Local Access')


class Simulation:
    def __init__(self, system: CacheSystem, seed: Optional[int] = None):
        self.system = system
        self.rng = random.Random(seed)

    def generate(self, name: str, **params) -> List[int]:
        ram_size = self.system.config.ram_size
        if name == 'Sequential':
            return list(traffic.sequential(params.get('start', 0), params.get('count', ram_size), ram_size))
        elif name == 'Random Access':
            return list(traffic.random_addresses(params.get('count', 16), ram_size, self.rng))
        elif name == 'Local Access':
            return list(traffic.local_regions(
                params.get('requests', 16),
                params.get('locality_range', self.system.config.block_size * 4),
                params.get('regions', 2),
                ram_size,
                self.rng,
                on_region=params.get('on_region'),
            ))
        raise ValueError(f"unknown scenario {name!r}; expected one of {', '.join(SCENARIOS)}")

    def run_scenario(self, name: str, num_passes: int = 1, **params) -> Dict[str, float]:
        # The cache is not reset between passes so later passes see the
        # blocks the earlier ones left behind.
        addresses = self.generate(name, **params)
        for _ in range(num_passes):
            self.system.run(addresses)
        return self.system.stats()
