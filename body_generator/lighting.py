# body_generator/lighting.py

"""
================================================================================
DEPTH-TO-NORMAL LIGHTING
================================================================================
Derives surface normals from a depth field and applies a single directional
light plus ambient term, with an optional specular highlight.

Data Contract:
---------------
- Inputs:
    - depth: 2D float array (the crater DepthField).
    - base colours as float RGB in [0, 1], shape (H, W, 3).
    - light/view directions as 3-tuples (normalised internally).
- Outputs:
    - normal_map: (H, W, 3) unit vectors.
    - shade: (H, W, 3) float RGB clamped to [0, 1].
- Side Effects: None.
================================================================================
"""

import numpy as np
from scipy.ndimage import correlate1d

# Central difference: depth[i+1] - depth[i-1].
_CENTRAL_DIFFERENCE = np.array([-1.0, 0.0, 1.0])


def normalize(vector) -> np.ndarray:
    vector = np.asarray(vector, dtype=np.float64)
    length = np.linalg.norm(vector)
    if length == 0:
        raise ValueError("Cannot normalize a zero-length vector.")
    return vector / length


def normal_map(depth: np.ndarray, strength: float) -> np.ndarray:
    """
    Per-pixel normals from central differences. Samples beyond the array
    edge are clamped to the edge value (mode='nearest').
    """
    dx = correlate1d(depth, _CENTRAL_DIFFERENCE, axis=1, mode='nearest') * strength
    dy = correlate1d(depth, _CENTRAL_DIFFERENCE, axis=0, mode='nearest') * strength

    normals = np.stack([-dx, -dy, np.ones_like(depth)], axis=-1)
    return normals / np.linalg.norm(normals, axis=-1, keepdims=True)


def normal_at(depth: np.ndarray, x: int, y: int, strength: float) -> np.ndarray:
    """Single-pixel form of normal_map."""
    height, width = depth.shape
    x0, x1 = max(x - 1, 0), min(x + 1, width - 1)
    y0, y1 = max(y - 1, 0), min(y + 1, height - 1)
    dx = (depth[y, x1] - depth[y, x0]) * strength
    dy = (depth[y1, x] - depth[y0, x]) * strength
    return normalize((-dx, -dy, 1.0))


def shade(base_rgb: np.ndarray, normals: np.ndarray, light_dir, ambient: float, intensity: float) -> np.ndarray:
    """Lambert: factor = ambient + max(0, n.l) * intensity, applied to every channel."""
    light = normalize(light_dir)
    diffuse = np.maximum(normals @ light, 0.0)
    factor = ambient + diffuse * intensity
    return np.clip(base_rgb * factor[..., np.newaxis], 0.0, 1.0)


def specular(normals: np.ndarray, light_dir, view_dir, power: float, strength: float) -> np.ndarray:
    """
    Phong highlight: the light reflected about the normal, compared with a
    fixed view direction. Returns an (H, W) additive brightness term.
    """
    light = normalize(light_dir)
    view = normalize(view_dir)

    n_dot_l = normals @ light
    reflected = 2.0 * n_dot_l[..., np.newaxis] * normals - light
    highlight = np.maximum(reflected @ view, 0.0) ** power
    # Surfaces facing away from the light get no highlight.
    return np.where(n_dot_l > 0.0, highlight * strength, 0.0)
