from .config import DiffusionConfig, MedianConfig
from .errors import (
    CollectiveError,
    ConfigError,
    FilterError,
    LoadError,
    UsageError,
    WriteError,
)
from .filters import apply_diffusion_filter, apply_filter, apply_median_filter
from .image import load_image, save_image
from .partition import RowBand, partition_rows

__all__ = [
    "DiffusionConfig",
    "MedianConfig",
    "CollectiveError",
    "ConfigError",
    "FilterError",
    "LoadError",
    "UsageError",
    "WriteError",
    "apply_diffusion_filter",
    "apply_filter",
    "apply_median_filter",
    "load_image",
    "save_image",
    "RowBand",
    "partition_rows",
]
