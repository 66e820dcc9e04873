"""
Various constants for textfx
"""
from enum import Enum


class LayerKind(str, Enum):
    """
    Layer kind, the discriminator of the layer union.
    """
    BACKGROUND = 'full'
    TEXT = 'text'
    SUBJECT = 'subject'


class BlendMode(str, Enum):
    """
    Blend modes supported by the raster compositor.
    """
    NORMAL = 'normal'
    MULTIPLY = 'multiply'
    SCREEN = 'screen'
    OVERLAY = 'overlay'
    HARD_LIGHT = 'hard-light'


class SurfaceRole(str, Enum):
    """
    Surface that initiated a drag.
    """
    PREVIEW = 'preview'
    TOUCHPAD = 'touchpad'


class Direction(str, Enum):
    """
    Nudge direction.
    """
    UP = 'up'
    DOWN = 'down'
    LEFT = 'left'
    RIGHT = 'right'


class EventType(str, Enum):
    """
    Global event names a drag session subscribes to.
    """
    POINTER_MOVE = 'pointermove'
    POINTER_UP = 'pointerup'
    POINTER_CANCEL = 'pointercancel'


# Normalized space spans [-50, 50] on both axes with the origin at center.
NORMALIZED_MIN = -50.0
NORMALIZED_MAX = 50.0

# Gesture tuning.
SNAP_THRESHOLD = 2.0
NUDGE_STEP = 2.0
PINCH_SENSITIVITY = 3.0
SCROLL_SENSITIVITY = 0.2
TRACKPAD_SENSITIVITY_MULTIPLIER = 1.0
TRACKPAD_DELTA_THRESHOLD = 10.0

# Text layer defaults.
DEFAULT_TEXT = 'edit'
DEFAULT_TEXT_NAME = 'Edit'
FALLBACK_TEXT_NAME = 'New Text'
DEFAULT_FONT_FAMILY = 'Inter'
DEFAULT_COLOR = 'white'
DEFAULT_FONT_SIZE = 200.0
DEFAULT_FONT_WEIGHT = 800
DEFAULT_SHADOW_COLOR = 'rgba(0, 0, 0, 0.8)'
DEFAULT_SHADOW_SIZE = 4.0

# Attributes only available with the premium feature set.
PREMIUM_ATTRIBUTES = frozenset(('tilt_x', 'tilt_y', 'letter_spacing'))

# Filter defaults.
DEFAULT_FILTER = 'original'
DEFAULT_INTENSITY = 100.0

# Warmth overlay colors (RGB, 0-255).
WARM_OVERLAY = (255, 165, 0)
COOL_OVERLAY = (0, 0, 255)

EXPORT_FILENAME = 'text-behind-image.png'
BACKGROUND_REMOVAL_ERROR = (
    "Sorry, we couldn't remove the background from this image."
)
