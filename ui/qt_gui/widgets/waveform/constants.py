"""
Waveform Constants

Central location for waveform dimensions and defaults.
Colors are defined in core/style.py.
"""

# =============================================================================
# Peak resolution
# =============================================================================

PEAK_BUCKET_COUNT = 200  # Peak visualization
BAR_COUNT = 50  # Bar-style waveform
FALLBACK_SURFACE_WIDTH = 800  # Detailed waveform before it has been laid out

# =============================================================================
# Playback
# =============================================================================

DEFAULT_VOLUME = 0.8

# =============================================================================
# Dimensions
# =============================================================================

DETAILED_HEIGHT = 120
BARS_HEIGHT = 64
PEAK_VIEW_HEIGHT = 96
ARRANGEMENT_HEIGHT = 200

WAVEFORM_SCALE = 1.0  # Detailed view amplitude scale
PEAK_VIEW_SCALE = 0.9  # Peak view keeps a margin top and bottom
MIN_SEGMENT_HEIGHT = 1  # Silence still draws a hairline
MIN_BAR_HEIGHT = 4
BAR_GAP = 2
BARS_PADDING = 8  # Inset of the bar strip inside its rounded background

PLAYHEAD_WIDTH = 2
HOVER_DASH_PATTERN = [4, 4]
PEAK_HOVER_DASH_PATTERN = [5, 5]
DRAG_HANDLE_RADIUS = 6

TIME_LABEL_HEIGHT = 18

# =============================================================================
# Arrangement
# =============================================================================

BARS_PER_PHRASE = 4
DEFAULT_BEATS_PER_BAR = 4
BAR_LABEL_EVERY = 4  # Label every 4th bar (bar 0 excluded)
BAR_LABEL_OFFSET_X = 2
BAR_LABEL_BASELINE_Y = 12

SECTION_HEADER_HEIGHT = 20
SECTION_EDGE_HANDLE_PX = 6  # Grab width of a section's resize edge
DELETE_BUTTON_SIZE = 14
