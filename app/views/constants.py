"""
UI/view constants centralized for reuse across view modules.

Sizes are in device-independent pixels. Label formats follow the default
Chinese calendar labels and can be overridden from settings.json.
"""

from __future__ import annotations

from PySide6.QtGui import QColor

# Grid geometry
GRID_COLUMNS: int = 7
CELL_HEIGHT_PX: int = 88
CELL_MIN_WIDTH_PX: int = 48
CELL_RADIUS_PX: int = 12
GRID_SPACING_PX: int = 2
GRID_MARGIN_PX: int = 2

# Thumbnails are requested larger than the cell so they stay sharp
DEFAULT_THUMB_REQUEST_PX: int = 200

# Labels
YEAR_FORMAT: str = "{year}年"
MONTH_FORMAT: str = "{month}月"
DAY_FONT_PT: int = 12
BADGE_FONT_PT: int = 10
WEEKDAY_FONT_PT: int = 12
MONTH_FONT_PT: int = 32
YEAR_FONT_PT: int = 18

# Colors
ACCENT_COLOR = QColor(255, 59, 48)
CELL_BACKGROUND = QColor(242, 242, 247, 128)
BADGE_BACKGROUND = QColor(0, 0, 0, 102)
GRADIENT_TOP = QColor(0, 0, 0, 77)
GRADIENT_BOTTOM = QColor(0, 0, 0, 26)
SELECTED_BORDER = QColor(255, 59, 48, 200)
