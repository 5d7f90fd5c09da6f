import math
from dataclasses import dataclass

from .errors import ConfigError


def _check_workers(workers, height):
    if workers < 1:
        raise ConfigError(f"worker count must be at least 1, got {workers}")
    if workers > height:
        raise ConfigError(
            f"worker count {workers} exceeds image height {height}"
        )


@dataclass(frozen=True)
class DiffusionConfig:
    """Directional diffusion: ``iterations`` rounds with diffusivity ``lam``."""

    iterations: int
    lam: float
    workers: int

    name = "diffusion"

    def validate(self, height):
        if self.iterations < 0:
            raise ConfigError(f"iterations must be >= 0, got {self.iterations}")
        if self.lam == 0 or not math.isfinite(self.lam):
            raise ConfigError(f"lambda must be a finite non-zero number, got {self.lam}")
        _check_workers(self.workers, height)


@dataclass(frozen=True)
class MedianConfig:
    """Median filter over a ``window_size`` neighborhood."""

    window_size: int
    workers: int

    name = "median"

    @property
    def halo(self):
        # rows a band needs from each neighbor
        return self.window_size // 2

    def validate(self, height):
        if self.window_size < 1:
            raise ConfigError(f"window size must be >= 1, got {self.window_size}")
        _check_workers(self.workers, height)
