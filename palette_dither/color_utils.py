"""Gamma / linear-light conversion and image quality metrics."""

from __future__ import annotations

import numpy as np
from skimage.filters import gaussian
from skimage.metrics import peak_signal_noise_ratio

GAMMA = 2.2


def _check_buffer(buffer: np.ndarray) -> None:
    if not isinstance(buffer, np.ndarray) or not np.issubdtype(buffer.dtype, np.floating):
        raise TypeError("buffer must be a floating-point NumPy array")
    if buffer.ndim < 1 or buffer.shape[-1] != 3:
        raise ValueError("buffer must have 3 colour channels on its last axis")


def to_linear(buffer: np.ndarray, gamma: float = GAMMA) -> np.ndarray:
    """Decode gamma-encoded RGB to linear light, **in place**.

    Every channel becomes ``x ** gamma``. The same array is returned so calls
    can be chained.
    """
    _check_buffer(buffer)
    np.power(buffer, gamma, out=buffer)
    return buffer


def to_gamma(buffer: np.ndarray, gamma: float = GAMMA) -> np.ndarray:
    """Re-encode linear-light RGB for display, **in place** (``x ** (1/gamma)``)."""
    _check_buffer(buffer)
    np.power(buffer, 1.0 / gamma, out=buffer)
    return buffer


def mean_color_error(reference: np.ndarray, candidate: np.ndarray) -> float:
    """Mean per-pixel Euclidean RGB distance between two images."""
    r = reference.reshape(-1, 3).astype(np.float64)
    c = candidate.reshape(-1, 3).astype(np.float64)
    return float(np.mean(np.sqrt(np.sum((r - c) ** 2, axis=1))))


def tone_error(
    reference: np.ndarray,
    candidate: np.ndarray,
    sigma: float = 1.5,
) -> float:
    """How far the local average tone of *candidate* drifts from *reference*.

    Both (H, W, 3) images are blurred with a Gaussian of width *sigma* before
    comparison, so a well-dithered image scores close to zero even though
    every individual pixel differs from the reference.

    Returns:
        Mean absolute difference of the blurred images.
    """
    blurred_ref = gaussian(reference.astype(np.float64), sigma=sigma, channel_axis=-1)
    blurred_cand = gaussian(candidate.astype(np.float64), sigma=sigma, channel_axis=-1)
    return float(np.mean(np.abs(blurred_ref - blurred_cand)))


def psnr(reference: np.ndarray, candidate: np.ndarray) -> float:
    """Peak signal-to-noise ratio for images in the [0, 1] range.

    Identical images score ``inf``.
    """
    ref = reference.astype(np.float64)
    cand = np.clip(candidate, 0.0, 1.0).astype(np.float64)
    if np.array_equal(ref, cand):
        return float("inf")
    return float(peak_signal_noise_ratio(ref, cand, data_range=1.0))
