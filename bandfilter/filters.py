from functools import partial

from .comm import run_local_group
from .config import DiffusionConfig, MedianConfig
from .diffusion import diffusion_round
from .distributed import distributed_filter
from .errors import ConfigError
from .median import median_rows
from .partition import partition_rows
from .shared import run_bands

THREADS = "threads"
PROCESSES = "processes"
MPI = "mpi"
BACKENDS = (THREADS, PROCESSES, MPI)


def apply_diffusion_filter(img_array, config, backend=THREADS):
    config.validate(img_array.shape[0])

    if backend == THREADS:
        bands = partition_rows(img_array.shape[0], config.workers)
        band_kernel = partial(diffusion_round, lam=config.lam)
        return run_bands(img_array, bands, band_kernel, config.iterations, config.workers)
    if backend == PROCESSES:
        return run_local_group(distributed_filter, img_array, config)

    raise ConfigError(f"backend {backend!r} cannot be started from a single process")


def apply_median_filter(img_array, config, backend=THREADS):
    config.validate(img_array.shape[0])

    if backend == THREADS:
        bands = partition_rows(img_array.shape[0], config.workers)
        band_kernel = partial(median_rows, window_size=config.window_size)
        return run_bands(img_array, bands, band_kernel, 1, config.workers)
    if backend == PROCESSES:
        return run_local_group(distributed_filter, img_array, config)

    raise ConfigError(f"backend {backend!r} cannot be started from a single process")


def apply_filter(img_array, config, backend=THREADS):
    if isinstance(config, DiffusionConfig):
        return apply_diffusion_filter(img_array, config, backend)
    if isinstance(config, MedianConfig):
        return apply_median_filter(img_array, config, backend)
    raise ConfigError(f"unknown filter configuration {config!r}")
