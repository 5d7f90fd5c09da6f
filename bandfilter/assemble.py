import numpy as np

from .errors import CollectiveError


def assemble_bands(parts):
    """Write gathered ``(band, rows)`` pairs into one image buffer.

    ``parts`` must come in rank order, which is also ascending row order.
    """
    if not parts:
        raise CollectiveError("no bands to assemble")

    expected_start = 0
    for band, rows in parts:
        if band.start != expected_start:
            raise CollectiveError(
                f"band {band.start}-{band.end} arrived out of order, expected row {expected_start}"
            )
        if rows.shape[0] != band.rows:
            raise CollectiveError(
                f"band {band.start}-{band.end} carries {rows.shape[0]} rows"
            )
        expected_start = band.end

    first = parts[0][1]
    output = np.empty((expected_start,) + first.shape[1:], dtype=np.uint8)

    for band, rows in parts:
        output[band.start:band.end] = rows

    return output
