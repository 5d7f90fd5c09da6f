import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def median_rows(src, start, end, window_size):
    """Median filter rows [start, end) of ``src``.

    Samples at offsets -window_size//2 .. +window_size//2 are collected
    around each pixel. Positions outside ``src`` are skipped rather than
    padded, so border windows hold fewer samples; the output is the sorted
    sample at index ``count // 2``.
    """
    pad = window_size // 2
    size = 2 * pad + 1
    height, width, channels = src.shape

    lo = max(start - pad, 0)
    hi = min(end + pad, height)
    # NaN marks positions outside the image; it sorts after every sample
    padded = np.pad(
        src[lo:hi].astype(np.float32),
        ((pad - (start - lo), pad - (hi - end)), (pad, pad), (0, 0)),
        mode="constant",
        constant_values=np.nan,
    )

    result = np.empty((end - start, width, channels), dtype=np.uint8)

    for y in range(end - start):
        rows = padded[y:y + size]
        # (width, channels, size, size)
        patches = sliding_window_view(rows, (size, size), axis=(0, 1))[0]
        samples = np.sort(patches.reshape(width, channels, size * size), axis=-1)
        count = np.count_nonzero(~np.isnan(samples), axis=-1)
        median = np.take_along_axis(samples, (count // 2)[..., np.newaxis], axis=-1)
        result[y] = median[..., 0].astype(np.uint8)

    return result
