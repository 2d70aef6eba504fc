"""
Configuration & Global Constants
================================
This module serves as the central registry for global constants.

Why is this file needed?
------------------------
Consistency: The grid step, the tube tessellation and the particle
   limits are shared by the model, the controllers and the viewport. Keeping
   them in one place guarantees the drawn strokes cling to the visible grid.
"""
# --- Input ---
GRID_STEP: float = 0.5  # must match the viewport grid cell size
POINT_EPSILON: float = 0.01  # minimum squared distance between recorded points
ERASE_TOLERANCE: float = 0.5

# --- Brush ---
THICKNESS_MIN: float = 0.05
THICKNESS_MAX: float = 0.5
THICKNESS_STEP: float = 0.05
DEFAULT_THICKNESS: float = 0.15

SCALE_MIN: float = 0.1
SCALE_MAX: float = 3.0
SCALE_STEP: float = 0.1
DEFAULT_SCALE: float = 1.0

COLOR_PALETTE: tuple[str, ...] = (
    "#ff6d6d", "#4ecdc4", "#45b7d1", "#96ceb4",
    "#feca57", "#ff9ff3", "#54a0ff", "#5f27cd",
)

# --- Tube geometry ---
TUBULAR_SEGMENTS: int = 128
RADIAL_SEGMENTS: int = 12

# --- Style filters ---
SPIRAL_FREQUENCY: float = 0.5
SPIRAL_AMPLITUDE: float = 0.05

# --- Symmetry ---
MIRROR_OPACITY: float = 0.6
WAVE_AMPLITUDE: float = 0.2
MANDALA_WAVE_AMPLITUDE: float = 0.3
GROUP_ROTATION_SPEED: float = 0.1  # rad/s

# --- Particles ---
MAX_PARTICLES: int = 500
PARTICLES_PER_FRAME: int = 5
PARTICLE_GRAVITY: float = 0.02
PARTICLE_DRAG: float = 0.98
PARTICLE_JITTER: float = 0.1

# --- Viewport ---
FRAME_INTERVAL_MS: int = 16
GROUND_SIZE: float = 10.0
BACKGROUND_COLOR: str = "#111111"
