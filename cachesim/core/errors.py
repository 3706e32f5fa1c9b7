"""Error types shared by the memory, cache and access engine.

- InvalidAddress: an address outside [0, RAM_SIZE). Recoverable, nothing
  is mutated when it is raised.
- LoadFailure: a bulk-load source could not be read or contained a bad
  token. `loaded` tells how many words made it into memory first.
- ConfigurationError: sizes that do not divide evenly. Only raised while
  building a system, never during an access.
"""
from typing import Optional


class InvalidAddress(IndexError):
    def __init__(self, address, ram_size: int):
        self.address = address
        self.ram_size = ram_size
        super().__init__(f"address {address} out of range [0, {ram_size - 1}]")


class LoadFailure(Exception):
    def __init__(self, message: str, loaded: int = 0, source: Optional[str] = None):
        self.loaded = loaded
        self.source = source
        super().__init__(message)


class ConfigurationError(ValueError):
    pass


__all__ = ["InvalidAddress", "LoadFailure", "ConfigurationError"]
