"""
Application Constants.
Stores default values for timeline geometry, buffers and zoom limits.
"""

# Coordinate Mapping
DEFAULT_BASE_WIDTH = 800.0  # Logical width of the full date range at zoom 1.0
DEFAULT_DATE_PADDING_DAYS = 7  # Days added before the first and after the last item

# Lane Geometry
DEFAULT_LANE_HEIGHT = 60
DEFAULT_HEADER_HEIGHT = 60

# Lane Packing
DEFAULT_LANE_GAP_DAYS = 1  # Touching items do not share a lane
LANE_STRATEGY_SCAN = "scan"
LANE_STRATEGY_INDEXED = "indexed"
LANE_STRATEGIES = (LANE_STRATEGY_SCAN, LANE_STRATEGY_INDEXED)

# Viewport Culling Buffers
DEFAULT_LANE_BUFFER = 5  # Lanes pre-rendered above and below the viewport
DEFAULT_ITEM_BUFFER_DAYS = 30  # Days pre-rendered left and right of the viewport
DEFAULT_MARKER_SLACK = 100.0  # Pixels

# Zoom
DEFAULT_ZOOM = 1.0
MIN_ZOOM = 0.2
MAX_ZOOM = 5.0
ZOOM_STEP = 1.5

# Container
DEFAULT_CONTAINER_WIDTH = 800
DEFAULT_CONTAINER_HEIGHT = 600

# Environment
ENV_PREFIX = "TIMELANE_"
