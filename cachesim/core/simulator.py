"""CacheSystem coordinates RAM, cache and statistics.

Every read and write goes through here. Writes are write-through (RAM is
always updated) and write-allocate (a write miss first reads the block in,
which counts as a miss, then patches the cached copy).

Passing debug=True produces an AccessTrace describing what happened. The
trace goes to `on_trace` (if set) and is kept as `last_trace`; it never
changes state or the returned value.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .cache import AddressParts, Cache
from .config import CacheConfig
from .errors import LoadFailure
from .ram import RAM
from ..data.stats_export import Statistics

logger = logging.getLogger(__name__)


@dataclass
class AccessTrace:
    operation: str  # 'read' or 'write'
    address: int
    parts: AddressParts
    hit: bool
    way: int
    value: int
    evicted_tag: Optional[int] = None
    evicted_block: Optional[int] = None
    allocated: bool = False

    @property
    def set_index(self) -> int:
        return self.parts.set_index


class CacheSystem:
    def __init__(self, config: Optional[CacheConfig] = None,
                 on_trace: Optional[Callable[[AccessTrace], None]] = None):
        self.config = config or CacheConfig()
        self.on_trace = on_trace
        self.ram = RAM(self.config.ram_size)
        self.cache = Cache(self.config)
        self.stats_counter = Statistics()
        self.global_time = 0
        self.last_trace: Optional[AccessTrace] = None

    @classmethod
    def init(cls, ram_size: int, block_size: int, num_sets: int, num_ways: int,
             **kwargs) -> "CacheSystem":
        return cls(CacheConfig(ram_size=ram_size, block_size=block_size,
                               num_sets=num_sets, num_ways=num_ways), **kwargs)

    def reset(self):
        # fresh RAM contents, empty cache, counters from zero
        self.ram.reset()
        self.cache.reset()
        self.stats_counter.reset()
        self.global_time = 0
        self.last_trace = None

    @property
    def hit_count(self) -> int:
        return self.stats_counter.hits

    @property
    def miss_count(self) -> int:
        return self.stats_counter.misses

    def _validate(self, address: int):
        # RAM owns the bounds rule; raises InvalidAddress before anything changes
        self.ram.check_address(address)

    def _emit(self, trace: AccessTrace):
        self.last_trace = trace
        if self.on_trace is not None:
            self.on_trace(trace)

    def read(self, address: int, debug: bool = False) -> int:
        self._validate(address)
        parts = self.cache.decode(address)

        way = self.cache.probe(parts.set_index, parts.tag)
        if way is not None:
            self.stats_counter.record_access(True)
            value = self.cache.line(parts.set_index, way).block[parts.offset]
            if debug:
                self._emit(AccessTrace('read', address, parts, True, way, value))
            return value

        self.stats_counter.record_access(False)
        way = self.cache.select_victim(parts.set_index)
        evicted = self.cache.load_block(parts.set_index, way, parts.block_number,
                                        self.ram, self.global_time)
        self.global_time += 1
        value = self.cache.line(parts.set_index, way).block[parts.offset]
        if debug:
            ev_tag, ev_block = evicted if evicted else (None, None)
            self._emit(AccessTrace('read', address, parts, False, way, value,
                                   evicted_tag=ev_tag, evicted_block=ev_block))
        return value

    def write(self, address: int, value: int, debug: bool = False) -> None:
        self._validate(address)
        value = int(value)
        # write-through: RAM is always current
        self.ram.write(address, value)
        parts = self.cache.decode(address)

        way = self.cache.probe(parts.set_index, parts.tag)
        hit = way is not None
        if not hit:
            # write-allocate: bring the block in (counted as a miss)
            self.read(address, debug=debug)
            way = self.cache.probe(parts.set_index, parts.tag)
        self.cache.line(parts.set_index, way).block[parts.offset] = value
        if debug:
            self._emit(AccessTrace('write', address, parts, hit, way, value, allocated=not hit))

    def run(self, addresses: Iterable[int], callback: Optional[Callable[[int, int], None]] = None) -> int:
        """Read every address in turn. Returns the number of reads performed."""
        count = 0
        for address in addresses:
            value = self.read(address)
            count += 1
            if callback:
                callback(address, value)
        return count

    def load_bulk(self, words: Iterable[int], source: Optional[str] = None) -> int:
        """Overwrite RAM from index 0 with `words`.

        Stops at RAM capacity or at the first word that is not an integer.
        A bad word still leaves the words before it in RAM and raises
        LoadFailure with that count.
        """
        values: List[int] = []
        bad_word = None
        for word in words:
            if len(values) >= self.config.ram_size:
                break
            try:
                values.append(int(word))
            except (TypeError, ValueError):
                bad_word = word
                break

        loaded = self.ram.load_bulk(values)
        logger.info("%d words loaded into RAM", loaded)
        if bad_word is not None:
            where = f" in {source}" if source else ""
            logger.warning("stopped loading%s at malformed value %r", where, bad_word)
            raise LoadFailure(f"malformed value {bad_word!r}{where}", loaded=loaded, source=source)
        return loaded

    def load_bulk_file(self, path: str) -> int:
        """Load whitespace separated integers from a text file into RAM.

        Words are taken left to right until EOF, RAM capacity or the first
        token that is not an integer. A bad token still leaves the words
        before it in RAM and raises LoadFailure with that count.
        """
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                text = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("cannot open %s: %s", path, exc)
            raise LoadFailure(f"Error opening file {path}: {exc}", loaded=0, source=path) from exc
        return self.load_bulk(text.split(), source=path)

    def dump_memory(self) -> List[Tuple[int, int]]:
        return self.ram.dump()

    def dump_cache(self) -> List[Tuple[int, int, bool, int, List[int]]]:
        return self.cache.dump()

    def stats(self) -> Dict[str, float]:
        s = self.stats_counter
        return {
            'accesses': s.accesses,
            'hits': s.hits,
            'misses': s.misses,
            'hit_rate': s.hit_rate,
            'miss_rate': s.miss_rate,
            'filled_lines': self.cache.filled_lines(),
            'total_lines': self.cache.total_lines,
            'avg_cached_value': self.cache.average_cached_value(),
        }
