"""Simple RAM model.

This is a word-addressable RAM abstraction backing the cache. Every word
starts out holding its own index so cache contents are easy to recognise
in dumps.

Parameters:
- RAM(size_words)
- read(address) -> stored word
- write(address, value) -> stores value at address
- load_bulk(values) -> overwrites words from index 0, returns the count
- dump() -> [(index, value), ...]
- reset() -> restores the initial contents
"""
from typing import Iterable, List, Tuple

from cachesim.core.errors import InvalidAddress


class RAM:
    def __init__(self, size_words: int = 512):
        self.size = int(size_words)
        self.storage: List[int] = []
        self.reset()

    def check_address(self, address: int) -> int:
        if not isinstance(address, int) or isinstance(address, bool):
            raise TypeError(f"address must be int, got {type(address).__name__}")
        if address < 0 or address >= self.size:
            raise InvalidAddress(address, self.size)
        return address

    def read(self, address: int) -> int:
        """Read the word at `address`."""
        return self.storage[self.check_address(address)]

    def write(self, address: int, value: int):
        """Write `value` to `address`. Out-of-range addresses raise InvalidAddress."""
        a = self.check_address(address)
        self.storage[a] = int(value)

    def read_block(self, base: int, length: int) -> List[int]:
        # words past the end of memory read as zero
        return [self.storage[a] if 0 <= a < self.size else 0 for a in range(base, base + length)]

    def load_bulk(self, values: Iterable[int]) -> int:
        loaded = 0
        for value in values:
            if loaded >= self.size:
                break
            self.storage[loaded] = int(value)
            loaded += 1
        return loaded

    def dump(self) -> List[Tuple[int, int]]:
        return list(enumerate(self.storage))

    def reset(self):
        self.storage = list(range(self.size))

    def __len__(self):
        return self.size
