# body_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the body
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC RUN.
Instead, pass a configuration dictionary to the BodyGenerator instance.
================================================================================
"""

# --- Seeds ---
DEFAULT_SEED = 1337
# Large primes used to offset the body seed for each noise layer, keeping the
# layers decorrelated but deterministic from the master seed.
BASE_SEED_OFFSET = 0
DETAIL_SEED_OFFSET = 98761
SECONDARY_SEED_OFFSET = 12347
CRATER_SEED_OFFSET = 54321
SHAPE_SEED_OFFSET = 25391
ATMOSPHERE_SEED_OFFSET = 77813

# Hash salts distinguish independent draws that share a seed and coordinates.
CRATER_SALT = 101
CRATER_SHAPE_SALT = 103
SHAPE_SALT = 107
ATMOSPHERE_SALT = 109
EFFECT_SALT = 113

# --- Fractal Noise ---
# Starting frequency and amplitude of the first fBm octave. Themes override.
NOISE_BASE_FREQUENCY = 8.0
NOISE_BASE_AMPLITUDE = 0.5
MIN_NOISE_OCTAVES = 1
MAX_NOISE_OCTAVES = 4

# --- Rasterization ---
# Pixels added on every side before rasterizing so finite differences at the
# silhouette have neighbours. They are cropped away from the final buffer.
SURFACE_PADDING_PX = 2

# Edge darkening: brightness = 1 - dist^2 * k, per category name.
EDGE_DARKENING = {
    "terran": 0.35,
    "gaseous": 0.45,
    "moon": 0.30,
    "asteroid": 0.25,
}

# --- Palettes ---
MIN_PALETTE_SIZE = 3
MAX_PALETTE_SIZE = 8

# --- Lighting ---
# Direction *towards* the light, upper-left and in front of the body.
LIGHT_DIRECTION = (-0.5, -0.5, 0.7)
VIEW_DIRECTION = (0.0, 0.0, 1.0)
AMBIENT_LIGHT = 0.35
LIGHT_INTENSITY = 0.9
# Scales the depth gradient before it is combined with the up vector.
NORMAL_STRENGTH = 6.0
SPECULAR_POWER = 16.0
SPECULAR_STRENGTH = 0.25
# Depth gradients are per pixel; this size gets NORMAL_STRENGTH unchanged and
# other sizes are scaled so lighting looks the same at every resolution.
NORMAL_REFERENCE_SIZE_PX = 64

# --- Crater Field ---
# Centre distance must be >= (r_a + r_b) * margin.
CRATER_OVERLAP_MARGIN = 1.1
CRATER_ATTEMPTS_PER_CRATER = 12
# Fraction of the body radius inside which crater centres are sampled.
CRATER_CENTER_SPREAD = 0.85
# Depth profile breakpoints, as a fraction of the crater radius.
CRATER_FLOOR_END = 0.2
CRATER_WALL_END = 0.85
CRATER_FLOOR_CURVATURE = 0.1
CRATER_WALL_EXPONENT = 1.5
# Rim overshoot height as a fraction of the crater depth.
CRATER_RIM_HEIGHT = 0.15
CRATER_NOISE_FREQ_RANGE = (1.5, 4.0)
CRATER_NOISE_AMP_RANGE = (0.0, 0.2)
CRATER_ELONGATION_RANGE = (0.0, 0.3)

# --- Asteroid Silhouette ---
ASTEROID_ELONGATION_RANGE = (1.05, 1.45)
ASTEROID_LOBE_CHOICES = (2, 3, 4, 5)
ASTEROID_WOBBLE_RANGE = (0.04, 0.12)

# --- Atmosphere ---
DEFAULT_ATMOSPHERE_THICKNESS = 0.15
# How far (normalised to the body radius) the halo reaches under the body edge
# so the two buffers meet without a visible seam.
ATMOSPHERE_OVERLAP = 0.03
ATMOSPHERE_MAX_ALPHA = 0.85
ATMOSPHERE_BAND_STEPS = 6
# Bodies at least this large get the stepped (banded) alpha falloff.
BANDED_ATMOSPHERE_MIN_PX = 128
ATMOSPHERE_COLOR_JITTER = 12
ATMOSPHERE_PATTERN_STRENGTH = 0.35

# --- Generation Cache ---
MAX_CACHE_SIZE = 32
CACHE_TTL_SECONDS = 120.0
# Minimum time between two full TTL sweeps of the cache.
CACHE_SWEEP_INTERVAL_SECONDS = 5.0

# --- Size Classes ---
SIZE_CLASS_PX = {
    "tiny": 32,
    "small": 48,
    "medium": 96,
    "large": 160,
    "huge": 256,
}

# --- Post Effects ---
# Secondary noise layer that drives every post effect.
SECONDARY_NOISE_OCTAVES = 3
SECONDARY_NOISE_FREQUENCY = 6.0
# Great spot: an elliptical storm on gaseous bodies, in projected (u, v).
GREAT_SPOT_U_RANGE = (0.3, 0.7)
GREAT_SPOT_V_RANGE = (0.55, 0.72)
GREAT_SPOT_RADII = (0.14, 0.08)
GREAT_SPOT_DARKENING = 0.3
GREAT_SPOT_TURBULENCE = 0.3
# Lava hotspots glow where secondary noise exceeds the threshold.
LAVA_HOTSPOT_THRESHOLD = 0.62
LAVA_HOTSPOT_GLOW = (0.9, 0.45, 0.1)
# Polar caps cover |latitude| above this value, with a noisy edge.
POLAR_CAP_LATITUDE = 0.8
POLAR_CAP_JITTER = 0.15
POLAR_CAP_COLOR = (240, 246, 252)

# --- Atmosphere Patterns ---
ATMOSPHERE_BAND_COUNT = 6
ATMOSPHERE_SINE_LOBES = 5
ATMOSPHERE_CLOUD_FREQUENCY = 1.5
ATMOSPHERE_DUST_FREQUENCY = 3.0
ATMOSPHERE_PATTERN_OCTAVES = 3
