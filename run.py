"""Entry point for the Cache Memory Simulator.

Usage:
    python run.py          # starts the interactive menu
    python run.py --demo   # runs a quick headless scenario and prints stats
    python run.py --config cache.json --ways 2 --seed 7
"""
import argparse
import logging
import sys

from cachesim.core.config import CacheConfig
from cachesim.core.errors import ConfigurationError
from cachesim.core.simulator import CacheSystem
from cachesim.simulation._ui_helpers import format_stats


def build_config(args) -> CacheConfig:
    base = CacheConfig.from_json(args.config).to_dict() if args.config else CacheConfig().to_dict()
    overrides = {
        'ram_size': args.ram_size,
        'block_size': args.block_size,
        'num_sets': args.sets,
        'num_ways': args.ways,
    }
    base.update({k: v for k, v in overrides.items() if v is not None})
    return CacheConfig.from_mapping(base)


def headless_demo(system: CacheSystem):
    # Simple scenario to validate cache logic
    block = system.config.block_size
    seq = [0, 1, block, 0, 2 * block, block + 1, 0]
    system.run(seq)
    system.write(3 * block, -1)
    print('Read back after write:', system.read(3 * block))
    print('Cache statistics:')
    for line in format_stats(system.stats()):
        print(line)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Set-associative cache simulator')
    parser.add_argument('--demo', action='store_true', help='run a short headless scenario and exit')
    parser.add_argument('--config', help='JSON file with ram_size/block_size/num_sets/num_ways')
    parser.add_argument('--ram-size', type=int)
    parser.add_argument('--block-size', type=int)
    parser.add_argument('--sets', type=int)
    parser.add_argument('--ways', type=int)
    parser.add_argument('--seed', type=int, help='seed for random traffic')
    parser.add_argument('--log-level', default='WARNING')
    args = parser.parse_args(argv)

    logging.basicConfig(format='%(levelname)s - %(name)s - %(message)s',
                        level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        config = build_config(args)
    except ConfigurationError as exc:
        parser.error(str(exc))
    system = CacheSystem(config)

    if args.demo:
        headless_demo(system)
    else:
        # Import the menu
        from cachesim.simulation.user_interface import run_ui
        run_ui(system, seed=args.seed)
    return 0


if __name__ == '__main__':
    sys.exit(main())
