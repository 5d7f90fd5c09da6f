import numpy as np


def conductance(delta, lam):
    return np.exp(-(delta / lam) ** 2)


def diffusion_round(src, start, end, lam):
    """One diffusion update of rows [start, end) of ``src``.

    Neighbors are read from ``src`` only: a row above ``start`` or below
    ``end`` is used when ``src`` has it, otherwise that side is treated as
    the image border and contributes no flux. The same holds for the left
    and right columns.

    Returns a new uint8 array with ``end - start`` rows.
    """
    height = src.shape[0]
    top = 1 if start == 0 else 0
    bottom = 1 if end == height else 0

    window = src[max(start - 1, 0):min(end + 1, height)].astype(np.float64)
    # replicated border rows and columns give a zero difference
    window = np.pad(window, ((top, bottom), (1, 1), (0, 0)), mode="edge")

    center = window[1:-1, 1:-1]
    delta_n = window[:-2, 1:-1] - center
    delta_s = window[2:, 1:-1] - center
    delta_e = window[1:-1, 2:] - center
    delta_w = window[1:-1, :-2] - center

    flux = (
        conductance(delta_n, lam) * delta_n
        + conductance(delta_s, lam) * delta_s
        + conductance(delta_e, lam) * delta_e
        + conductance(delta_w, lam) * delta_w
    )
    updated = center + 0.25 * flux

    return np.clip(updated, 0, 255).astype(np.uint8)
