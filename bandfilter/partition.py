from typing import NamedTuple

from .errors import ConfigError


class RowBand(NamedTuple):
    start: int
    end: int

    @property
    def rows(self):
        return self.end - self.start


def partition_rows(height, num_workers):
    """Split ``height`` rows into ``num_workers`` contiguous bands.

    Every band gets ``height // num_workers`` rows and the last one also
    takes the remainder, so the bands cover [0, height) in ascending order.
    """
    if num_workers < 1:
        raise ConfigError(f"worker count must be at least 1, got {num_workers}")
    if num_workers > height:
        raise ConfigError(
            f"worker count {num_workers} exceeds image height {height}; "
            "every worker needs at least one row"
        )

    bands = []
    rows_per_worker = height // num_workers

    for i in range(num_workers):
        start_y = i * rows_per_worker
        end_y = start_y + rows_per_worker if i < num_workers - 1 else height
        bands.append(RowBand(start_y, end_y))

    return bands
