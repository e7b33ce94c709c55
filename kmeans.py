"""Palette extraction: k-means++ clustering of an image's colours."""

import logging
from typing import Optional

import numpy as np
import pygame

from pixels import RGB

logger = logging.getLogger(__name__)

TARGET_COLORS = 16
MAX_ITERATIONS = 20


def load_image_pixels(path) -> np.ndarray:
    """Read an image file into an (H, W, 3) uint8 array."""
    surface = pygame.image.load(str(path))
    raw = pygame.surfarray.array3d(surface)  # shape (W, H, 3)
    return np.transpose(raw, (1, 0, 2))


def unique_colors(pixels) -> tuple[np.ndarray, np.ndarray]:
    """Deduplicate a pixel array of shape (..., 3+) into (colors, counts)."""
    arr = np.asarray(pixels)
    if arr.size == 0:
        return np.empty((0, 3), dtype=np.uint8), np.empty(0, dtype=np.int64)
    arr = arr.reshape(-1, arr.shape[-1])[:, :3]
    colors, counts = np.unique(arr, axis=0, return_counts=True)
    return colors, counts


def _sq_dist(points: np.ndarray, center: np.ndarray) -> np.ndarray:
    diff = points - center
    return np.einsum("ij,ij->i", diff, diff)


def seed_centers(points: np.ndarray, k: int,
                 rng: np.random.Generator) -> np.ndarray:
    """k-means++ style seeding: a random first centre, then repeatedly the
    point farthest (squared distance) from its nearest existing centre."""
    centers = [points[rng.integers(len(points))]]
    nearest = _sq_dist(points, centers[0])
    while len(centers) < k:
        idx = int(np.argmax(nearest))
        centers.append(points[idx])
        nearest = np.minimum(nearest, _sq_dist(points, points[idx]))
    return np.array(centers, dtype=np.float64)


def assign(points: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Index of the nearest centre for every point (first on ties)."""
    diff = points[:, np.newaxis, :] - centers[np.newaxis, :, :]
    return np.argmin(np.einsum("ijk,ijk->ij", diff, diff), axis=1)


def generate_palette(image_pixels, target_size: int = TARGET_COLORS,
                     max_iterations: int = MAX_ITERATIONS,
                     rng: Optional[np.random.Generator] = None) -> list[RGB]:
    """Cluster the colours of `image_pixels` into at most `target_size` colours.

    Points are the unique colours weighted by how often they occur. Empty
    clusters keep their previous centre. Returns [] for an empty image.
    k is capped at the number of unique colours, so fewer than
    `target_size` colours come back for images with few colours.
    """
    colors, counts = unique_colors(image_pixels)
    if len(colors) == 0:
        return []
    if rng is None:
        rng = np.random.default_rng()

    points = colors.astype(np.float64)
    weights = counts.astype(np.float64)
    k = min(max(1, target_size), len(points))
    centers = seed_centers(points, k, rng)

    for iteration in range(max_iterations):
        labels = assign(points, centers)
        updated = centers.copy()
        for i in range(k):
            members = labels == i
            if not members.any():
                continue
            w = weights[members]
            updated[i] = (points[members] * w[:, np.newaxis]).sum(axis=0) / w.sum()
        converged = np.array_equal(updated, centers)
        centers = updated
        if converged:
            logger.debug("k-means converged after %d iterations", iteration + 1)
            break

    result = np.clip(centers, 0, 255).astype(np.uint8)
    return [(int(r), int(g), int(b)) for r, g, b in result]
