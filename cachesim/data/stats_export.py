"""Statistics and exporter.
"""
import csv
import json
import logging
from collections import deque
from typing import Deque, List, Dict, Optional

logger = logging.getLogger(__name__)


def export_chart_json(hit_rate_history: List[float], stats: Dict[str, float], fpath: str) -> Optional[str]:
    """Export hit-rate history and stats to a JSON file. Returns saved path or None.
    """
    try:
        data = {
            'hit_rate_history': list(hit_rate_history),
            'stats': stats
        }
        with open(fpath, 'w', encoding='utf-8') as fh:
            json.dump(data, fh, indent=2)
        return fpath
    except OSError as exc:
        logger.warning("could not write %s: %s", fpath, exc)
        return None


def export_chart_pdf(hit_rate_history: List[float], fpath: str) -> Optional[str]:
    """Render the hit-rate history to a PDF using matplotlib and save it.
    Returns the saved file path or None on failure.
    """
    # Use matplotlib
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    data = list(hit_rate_history) or [0]
    fig, ax = plt.subplots(figsize=(6, 2))
    try:
        ax.plot(range(len(data)), data, color='#FFA500', linewidth=2)
        ax.fill_between(range(len(data)), data, color='#FFA500', alpha=0.1)
        ax.set_ylim(0, 1)
        ax.set_xlabel('Access')
        ax.set_ylabel('Hit rate')
        ax.grid(False)
        fig.tight_layout()
        fig.savefig(fpath, format='pdf', dpi=150)
        return fpath
    except OSError as exc:
        logger.warning("could not write %s: %s", fpath, exc)
        return None
    finally:
        plt.close(fig)


HISTORY_LIMIT = 4096


class Statistics:
    def __init__(self, history_limit: int = HISTORY_LIMIT):
        # only the most recent `history_limit` hit-rate samples are kept
        self.history_limit = history_limit
        self.reset()

    def reset(self):
        # counters start from zero
        self.hits = 0
        self.misses = 0
        self.hit_rate_history: Deque[float] = deque(maxlen=self.history_limit)

    def record_access(self, hit: bool):
        # simple counter update: call this for every cache access
        if hit:
            self.hits += 1
        else:
            self.misses += 1
        self.hit_rate_history.append(self.hit_rate)

    @property
    def accesses(self):
        return self.hits + self.misses

    @property
    def hit_rate(self):
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self):
        return (self.misses / self.accesses) if self.accesses else 0.0


class Exporter:
    FIELDS = ['accesses', 'hits', 'misses', 'hit_rate', 'miss_rate',
              'filled_lines', 'total_lines', 'avg_cached_value']

    @staticmethod
    def export_stats_csv(path: str, stats: Dict[str, float]):
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(Exporter.FIELDS)
            writer.writerow([stats[name] for name in Exporter.FIELDS])
