import numpy as np
from concurrent.futures import ThreadPoolExecutor


def filter_band(band_kernel, snapshot, output, band):
    output[band.start:band.end] = band_kernel(snapshot, band.start, band.end)
    return band


def run_bands(img_array, bands, band_kernel, rounds, num_workers):
    """Apply ``band_kernel`` for ``rounds`` rounds with one thread task per band.

    Tasks read the round-start snapshot and write only their own rows of
    the round-end buffer. The buffers swap once every task of the round has
    finished, so no task sees a value written in the same round.
    """
    snapshot = np.array(img_array, dtype=np.uint8, copy=True)
    if rounds == 0:
        return snapshot

    output = np.empty_like(snapshot)

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        for _ in range(rounds):
            futures = []

            for band in bands:
                future = executor.submit(filter_band, band_kernel, snapshot, output, band)
                futures.append(future)

            for future in futures:
                future.result()

            snapshot, output = output, snapshot

    return snapshot
