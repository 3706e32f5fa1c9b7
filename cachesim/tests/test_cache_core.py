"""Consolidated unit tests for core cache behaviors.

These tests focus on the cache core and access engine (no menu). They cover:

- address decomposition and its inverse
- read hits and misses, FIFO eviction
- write-through and write-allocate
- hit/miss accounting and statistics
- RAM bounds and invalid addresses

The default geometry is RAM_SIZE=512, BLOCK_SIZE=8, 4 sets x 4 ways, so
set 0 holds blocks 0, 4, 8, 12, ... i.e. addresses 0, 32, 64, 96, 128.
"""

import random

import pytest
from cachesim.core.cache import Cache
from cachesim.core.config import CacheConfig
from cachesim.core.errors import InvalidAddress
from cachesim.core.ram import RAM
from cachesim.core.simulator import CacheSystem


def test_decode_fields():
    c = Cache()
    parts = c.decode(77)
    # 77 // 8 = 9 -> set 9 % 4 = 1, tag 9 // 4 = 2, offset 77 % 8 = 5
    assert parts.block_number == 9
    assert parts.set_index == 1
    assert parts.tag == 2
    assert parts.offset == 5


@pytest.mark.parametrize('ram,bs,sets', [
    (512, 8, 4),
    (256, 4, 8),
    (64, 1, 16),
    (128, 16, 1),
])
def test_decode_is_injective_and_compose_inverts_it(ram, bs, sets):
    c = Cache(CacheConfig(ram_size=ram, block_size=bs, num_sets=sets, num_ways=2))
    seen = set()
    for a in range(ram):
        p = c.decode(a)
        key = (p.set_index, p.tag, p.offset)
        assert key not in seen
        seen.add(key)
        assert p.set_index + p.tag * sets == a // bs
        assert c.compose(p.set_index, p.tag, p.offset) == a


def test_read_and_write_paths_share_one_mapping(system):
    # a block brought in by a write must be hit by a later read and vice versa
    system.write(77, 5)
    misses = system.miss_count
    assert system.read(77) == 5
    assert system.read(72) == 72
    assert system.miss_count == misses
    parts = system.cache.decode(77)
    assert system.cache.probe(parts.set_index, parts.tag) is not None


def test_first_read_misses_then_hits(system):
    assert system.read(0) == 0
    assert (system.hit_count, system.miss_count) == (0, 1)
    # same block, other offsets -> hits
    assert system.read(0) == 0
    assert system.read(7) == 7
    assert (system.hit_count, system.miss_count) == (2, 1)


def test_repeated_reads_only_add_hits(system):
    system.read(100)
    for _ in range(10):
        assert system.read(100) == 100
    assert system.miss_count == 1
    assert system.hit_count == 10


def test_empty_way_is_preferred(system):
    for i, addr in enumerate((0, 32, 64)):
        system.read(addr)
        assert system.cache.probe(0, i) == i
    assert system.cache.select_victim(0) == 3


def test_fifo_evicts_oldest_load_not_least_recent():
    # Input: fill set 0 with blocks 0,4,8,12 (load order 0..3), hit block 0
    # again, then read block 16 (same set).
    # Expected: block 0 is evicted even though it was just hit (FIFO, not LRU).
    system = CacheSystem()
    for addr in (0, 32, 64, 96):
        system.read(addr)
    assert system.read(0) == 0  # hit, does not refresh load_order
    assert system.cache.line(0, 0).load_order == 0

    system.read(128)
    assert system.cache.probe(0, 0) is None
    assert system.cache.probe(0, 4) == 0
    for tag in (1, 2, 3):
        assert system.cache.probe(0, tag) is not None

    # the next victim is the block loaded second (tag 1, way 1)
    assert system.cache.select_victim(0) == 1


def test_fifo_keeps_evicting_in_load_order():
    system = CacheSystem()
    for k in range(8):
        system.read(k * 32)
    # tags 4..7 survive, loaded into ways 0..3 in order
    assert [system.cache.line(0, w).tag for w in range(4)] == [4, 5, 6, 7]
    assert [system.cache.line(0, w).load_order for w in range(4)] == [4, 5, 6, 7]


def test_victim_ties_go_to_lowest_way():
    c = Cache()
    for line in c.sets[2]:
        line.valid = True
        line.load_order = 3
    assert c.select_victim(2) == 0


def test_other_sets_are_untouched_by_eviction(system):
    system.read(8)  # block 1 -> set 1
    for k in range(6):
        system.read(k * 32)
    assert system.cache.probe(1, 0) is not None


def test_global_time_advances_per_load(system):
    system.read(0)
    system.read(1)
    system.read(8)
    assert system.global_time == 2
    assert system.cache.line(1, 0).load_order == 1


def test_write_through_updates_ram_on_hit_and_miss(system):
    system.write(10, 1000)  # miss
    assert system.ram.read(10) == 1000
    system.write(10, 2000)  # hit
    assert system.ram.read(10) == 2000
    assert system.read(10) == 2000


def test_write_miss_allocates_and_counts_a_miss(system):
    system.write(300, 42)
    assert (system.hit_count, system.miss_count) == (0, 1)
    parts = system.cache.decode(300)
    way = system.cache.probe(parts.set_index, parts.tag)
    assert way is not None
    assert system.cache.line(parts.set_index, way).block[parts.offset] == 42
    assert system.read(300) == 42
    assert (system.hit_count, system.miss_count) == (1, 1)


def test_write_hit_does_not_touch_counters(system):
    system.read(16)
    system.write(17, -5)
    assert (system.hit_count, system.miss_count) == (0, 1)
    assert system.read(17) == -5


def test_read_after_write_after_eviction(system):
    system.write(0, 11)
    # push block 0 out of set 0
    for addr in (32, 64, 96, 128):
        system.read(addr)
    assert system.cache.probe(0, 0) is None
    # RAM kept the value, so reloading gives it back
    assert system.read(0) == 11


def test_hits_plus_misses_equals_reads_plus_write_misses():
    # Input: 500 random reads/writes with a fixed seed.
    # Expected: hits + misses == reads + write misses (the internal read of
    # write-allocate is counted), and every read returns the last write.
    rng = random.Random(1234)
    system = CacheSystem()
    expected = {a: a for a in range(512)}
    reads = write_misses = 0
    for _ in range(500):
        addr = rng.randrange(512)
        if rng.random() < 0.4:
            parts = system.cache.decode(addr)
            if system.cache.probe(parts.set_index, parts.tag) is None:
                write_misses += 1
            value = rng.randint(-1000, 1000)
            system.write(addr, value)
            expected[addr] = value
        else:
            assert system.read(addr) == expected[addr]
            reads += 1
    assert system.hit_count + system.miss_count == reads + write_misses


def test_no_duplicate_tags_within_a_set():
    rng = random.Random(7)
    system = CacheSystem()
    for _ in range(300):
        system.read(rng.randrange(512))
    for cache_set in system.cache.sets:
        tags = [line.tag for line in cache_set if line.valid]
        assert len(tags) == len(set(tags))


def test_stats_on_empty_cache(system):
    s = system.stats()
    assert s['filled_lines'] == 0
    assert s['total_lines'] == 16
    assert s['hit_rate'] == 0.0
    assert s['miss_rate'] == 0.0
    assert s['avg_cached_value'] == 0.0


def test_stats_after_accesses(system):
    system.read(0)
    system.read(1)
    s = system.stats()
    assert s['hits'] == 1 and s['misses'] == 1 and s['accesses'] == 2
    assert s['hit_rate'] == pytest.approx(0.5)
    assert s['miss_rate'] == pytest.approx(0.5)
    assert s['filled_lines'] == 1
    # block 0 holds 0..7
    assert s['avg_cached_value'] == pytest.approx(3.5)


def test_out_of_range_access_changes_nothing(system):
    # Input: RAM_SIZE=512. read(0) then read(512), write(512, 1), read(-1).
    # Expected: the first read succeeds, every other call raises InvalidAddress
    # and leaves counters, cache and RAM as they were.
    assert system.read(0) == 0
    before = (system.stats(), system.dump_cache(), system.dump_memory(), system.global_time)
    with pytest.raises(InvalidAddress):
        system.read(512)
    with pytest.raises(InvalidAddress):
        system.write(512, 1)
    with pytest.raises(InvalidAddress):
        system.read(-1)
    after = (system.stats(), system.dump_cache(), system.dump_memory(), system.global_time)
    assert before == after


def test_invalid_address_is_an_index_error(system):
    with pytest.raises(IndexError) as info:
        system.read(9999)
    assert info.value.address == 9999
    assert info.value.ram_size == 512


def test_system_and_ram_share_the_address_rule():
    system = CacheSystem.init(64, 4, 2, 2)
    for bad in (64, -1, 1000):
        with pytest.raises(InvalidAddress) as from_system:
            system.read(bad)
        with pytest.raises(InvalidAddress) as from_ram:
            system.ram.read(bad)
        assert str(from_system.value) == str(from_ram.value)
    with pytest.raises(TypeError):
        system.write('3', 1)
    with pytest.raises(TypeError):
        system.read(True)
    assert system.stats()['accesses'] == 0


def test_debug_does_not_change_result_or_state():
    a, b = CacheSystem(), CacheSystem()
    for addr in (5, 40, 5, 200, 33):
        assert a.read(addr, debug=True) == b.read(addr)
    a.write(90, 3, debug=True)
    b.write(90, 3)
    assert a.stats() == b.stats()
    assert a.dump_cache() == b.dump_cache()


def test_dump_cache_shape(system):
    system.read(8)
    dump = system.dump_cache()
    assert len(dump) == 16
    assert dump[0] == (0, 0, False, -1, [0] * 8)
    set_index, way, valid, tag, block = dump[4]
    assert (set_index, way, valid, tag) == (1, 0, True, 0)
    assert block == list(range(8, 16))


def test_reset_restores_initial_state(system):
    system.write(3, 99)
    system.read(200)
    system.reset()
    assert system.ram.read(3) == 3
    assert system.cache.filled_lines() == 0
    assert system.stats()['accesses'] == 0
    assert system.global_time == 0


def test_init_builds_custom_geometry():
    system = CacheSystem.init(64, 4, 2, 2)
    assert system.cache.total_lines == 4
    assert system.read(63) == 63
    parts = system.cache.decode(63)
    assert (parts.block_number, parts.set_index, parts.tag, parts.offset) == (15, 1, 7, 3)


def test_ram_bounds_and_errors():
    # Input: RAM(size_words=8). Attempt ram.read(100) and ram.write(100,1).
    # Expected: Both operations raise InvalidAddress (an IndexError).
    ram = RAM(size_words=8)
    with pytest.raises(InvalidAddress):
        ram.read(100)
    with pytest.raises(InvalidAddress):
        ram.write(100, 1)
    with pytest.raises(TypeError):
        ram.read('3')
    assert ram.dump() == [(i, i) for i in range(8)]


def test_ram_block_reads_past_end_as_zero():
    ram = RAM(size_words=4)
    assert ram.read_block(2, 4) == [2, 3, 0, 0]


def test_ram_load_bulk_stops_at_capacity():
    ram = RAM(size_words=4)
    assert ram.load_bulk([9, 8]) == 2
    assert ram.dump() == [(0, 9), (1, 8), (2, 2), (3, 3)]
    assert ram.load_bulk(range(100, 110)) == 4
    assert ram.read(3) == 103
