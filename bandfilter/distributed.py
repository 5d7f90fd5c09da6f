"""Row-band filtering over a communicator (see ``bandfilter.comm``).

Every function here is run by every rank of the group. The root rank holds
the whole image; the others only ever see their own band plus the halo rows
their kernel needs.
"""
import numpy as np

from .assemble import assemble_bands
from .config import DiffusionConfig, MedianConfig
from .diffusion import diffusion_round
from .errors import ConfigError
from .median import median_rows
from .partition import partition_rows


def scatter_bands(comm, img_array, halo=0, root=0):
    """Hand each rank its band with up to ``halo`` extra rows on both sides.

    Returns ``(band, offset, rows)`` where ``rows[offset:offset + band.rows]``
    is the band itself.
    """
    pieces = None

    if comm.Get_rank() == root:
        height = img_array.shape[0]
        pieces = []

        for band in partition_rows(height, comm.Get_size()):
            lo = max(band.start - halo, 0)
            hi = min(band.end + halo, height)
            pieces.append((band, band.start - lo, img_array[lo:hi].copy()))

    return comm.scatter(pieces, root=root)


def gather_bands(comm, band, rows, root=0):
    """Send every band's rows to ``root`` and rebuild the image there."""
    parts = comm.gather((band, rows), root=root)
    if comm.Get_rank() != root:
        return None
    return assemble_bands(parts)


def exchange_halo(comm, rows):
    """Swap edge rows with the ranks above and below.

    Returns ``(above, below)``; either is None at the top or bottom of the
    image.
    """
    rank = comm.Get_rank()
    size = comm.Get_size()
    above = below = None

    if rank > 0:
        above = comm.sendrecv(rows[:1], dest=rank - 1, source=rank - 1)
    if rank < size - 1:
        below = comm.sendrecv(rows[-1:], dest=rank + 1, source=rank + 1)

    return above, below


def diffuse_band(comm, rows, iterations, lam):
    """Run the diffusion rounds on one band.

    Before each round the band's edge rows are exchanged with the
    neighboring ranks, so every round reads the neighbors' values from the
    previous round.
    """
    for _ in range(iterations):
        above, below = exchange_halo(comm, rows)
        window = [part for part in (above, rows, below) if part is not None]
        top = 0 if above is None else 1
        rows = diffusion_round(np.concatenate(window), top, top + rows.shape[0], lam)

    return rows


def distributed_filter(comm, img_array, config, root=0):
    if isinstance(config, DiffusionConfig):
        band, offset, rows = scatter_bands(comm, img_array, 0, root)
        result = diffuse_band(comm, rows, config.iterations, config.lam)
    elif isinstance(config, MedianConfig):
        band, offset, rows = scatter_bands(comm, img_array, config.halo, root)
        result = median_rows(rows, offset, offset + band.rows, config.window_size)
    else:
        raise ConfigError(f"unknown filter configuration {config!r}")

    return gather_bands(comm, band, result, root)


def roundtrip_bands(comm, img_array, config, root=0):
    """Scatter the bands and gather them back untouched."""
    band, offset, rows = scatter_bands(comm, img_array, 0, root)
    return gather_bands(comm, band, rows, root)
