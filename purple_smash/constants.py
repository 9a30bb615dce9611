"""
Purple Smash - Shared Constants

Central location for constants used across the app.
"""

# =============================================================================
# FIGURE LIFECYCLE
# =============================================================================

FADE_TICK_INTERVAL = 1.0     # Seconds between fade sweeps
FADE_TAIL = 2.0              # Seconds a figure takes to fade out once fading starts
DEFAULT_FADE_AFTER = 10.0    # Seconds before a figure starts fading
DEFAULT_MAX_FIGURES = 50     # Figures on screen before the oldest are evicted

# =============================================================================
# PLACEMENT
# =============================================================================

SPAWN_MARGIN = 150.0         # Keep spawned figures this far from every edge
MIN_SPAN = SPAWN_MARGIN * 2 + 1

# =============================================================================
# DRAWING
# =============================================================================

TRAIL_MIN_DISTANCE = 5.0     # Ignore pointer samples closer than this to the last one
TRAIL_MAX_POINTS = 300       # Across all trails, oldest points dropped first
TRAIL_FADE_START = 1.0       # Seconds before a trail point starts fading
TRAIL_LIFETIME = 2.5         # Seconds before a trail point disappears
TRAIL_MIN_WIDTH = 15.0
TRAIL_MAX_WIDTH = 25.0
TRAIL_SWEEP_INTERVAL = 0.25  # Seconds between trail fade sweeps

# =============================================================================
# AUTO-PLAY / ACCESSIBILITY
# =============================================================================

DEFAULT_AUTO_PLAY_INTERVAL = 3.0
DEFAULT_MAX_SIMULTANEOUS_SHAPES = 5
LARGE_ELEMENT_MIN_SIZE = 300.0
LARGE_ELEMENT_SPREAD = 100.0

# =============================================================================
# TERMINAL SURFACE
# =============================================================================
# A terminal cell is mapped onto logical units so the placement margins work
# the same way they would on a pixel display. Cells are roughly twice as tall
# as they are wide.

UNITS_PER_COL = 16
UNITS_PER_ROW = 32

# Timing
ESCAPE_HOLD_THRESHOLD = 1.0  # How long to hold Escape to leave (seconds)
ESCAPE_REPEAT_GAP = 0.5      # Longer than this between Escape repeats means it was let go
ANIMATION_INTERVAL = 0.25    # Seconds between animation frames

# Nerd Font icons (https://www.nerdfonts.com/cheat-sheet)
ICON_VOLUME_ON = "󰕾"        # nf-md-volume_high
ICON_VOLUME_OFF = "󰖁"       # nf-md-volume_off
ICON_SPEECH = "󰗋"           # nf-md-message_text
ICON_LOCK = "󰌾"             # nf-md-lock
