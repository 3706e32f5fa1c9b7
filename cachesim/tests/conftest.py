"""Test configuration for pytest.

Ensure the repository root is on sys.path so tests can import the `cachesim`
package and `run.py` without needing PYTHONPATH set externally.
"""
import os
import sys

import pytest

# Compute project root: two directories above this file (cachesim/tests -> cachesim -> project root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from cachesim.core.simulator import CacheSystem  # noqa: E402


@pytest.fixture
def system():
    # RAM_SIZE=512, BLOCK_SIZE=8, 4 sets x 4 ways
    return CacheSystem()


@pytest.fixture
def traced_system():
    traces = []
    sys_ = CacheSystem(on_trace=traces.append)
    sys_.traces = traces
    return sys_
