# body_generator/effects.py

"""
================================================================================
CATEGORY POST EFFECTS
================================================================================
Adjustments applied to the quantized base colour before lighting. Each effect
is keyed off a secondary noise field so that its shape varies per body while
staying deterministic.

Data Contract:
---------------
- Inputs:
    - rgb: (H, W, 3) float colours in [0, 1].
    - u, v: projected body coordinates, same (H, W) shape.
    - secondary: (H, W) noise in [0, 1].
    - seed: the body seed.
    - settings: the generator's consolidated settings dict.
- Outputs: a new (H, W, 3) float array, clamped to [0, 1].
- Side Effects: None.
================================================================================
"""

import numpy as np

from . import config as DEFAULTS
from .hashing import hash_range


def no_effect(rgb, u, v, secondary, seed, settings):
    return rgb


def great_spot(rgb, u, v, secondary, seed, settings):
    """Darkens an elliptical storm whose edge is bent by the secondary noise."""
    salt = DEFAULTS.EFFECT_SALT
    cu = hash_range(seed, 0, 0, salt, *settings['great_spot_u_range'])
    cv = hash_range(seed, 1, 0, salt, *settings['great_spot_v_range'])
    ru, rv = settings['great_spot_radii']

    ellipse = ((u - cu) / ru) ** 2 + ((v - cv) / rv) ** 2
    ellipse = ellipse * (1.0 + settings['great_spot_turbulence'] * (secondary - 0.5))

    darkening = np.where(ellipse < 1.0, (1.0 - ellipse) * settings['great_spot_darkening'], 0.0)
    return np.clip(rgb - darkening[..., np.newaxis], 0.0, 1.0)


def lava_hotspots(rgb, u, v, secondary, seed, settings):
    """Adds a warm glow wherever the secondary noise runs hot."""
    threshold = settings['lava_hotspot_threshold']
    heat = np.clip((secondary - threshold) / (1.0 - threshold), 0.0, 1.0)
    glow = np.asarray(settings['lava_hotspot_glow'], dtype=np.float64)
    return np.clip(rgb + heat[..., np.newaxis] * glow, 0.0, 1.0)


def polar_caps(rgb, u, v, secondary, seed, settings):
    """Replaces high latitudes with ice; the cap edge wanders with the noise."""
    latitude = np.abs(v * 2.0 - 1.0)
    edge = settings['polar_cap_latitude'] + (secondary - 0.5) * settings['polar_cap_jitter']
    ice = np.asarray(settings['polar_cap_color'], dtype=np.float64) / 255.0
    return np.where((latitude > edge)[..., np.newaxis], ice, rgb)


# Name -> effect. Theme tables refer to effects by these names.
POST_EFFECTS = {
    "none": no_effect,
    "great_spot": great_spot,
    "lava_hotspots": lava_hotspots,
    "polar_caps": polar_caps,
}
