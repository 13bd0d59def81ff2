"""
Console tile renderer - logs the board as ASCII art
"""

from typing import Dict, List, Optional

from .grid_types import Direction, GridPosition, Tile, TileColor
from .interfaces import ITileRenderer


_COLOR_CHARS = {
    TileColor.DEFAULT: '.',
    TileColor.PATH: 'o',
    TileColor.START: 'S',
    TileColor.END: 'E',
    TileColor.CORRECT: '+',
    TileColor.WRONG: 'X',
}

_ARROW_CHARS = {
    Direction.UP: '^',
    Direction.DOWN: 'v',
    Direction.LEFT: '<',
    Direction.RIGHT: '>',
}


class ConsoleTileRenderer(ITileRenderer):
    """
    Text stand-in for the floor display.

    The board is drawn with the far row (z = 0) on top and the start row
    (z = rows - 1) at the bottom, like looking down at the floor. Dimmed
    tiles are drawn as spaces. show() only logs when the picture changed.
    """

    def __init__(self, logger, dim_threshold: float = 0.2):
        """
        Args:
            logger: ClassLogger instance the board is written to
            dim_threshold: Tiles with alpha below this are drawn blank
        """
        self._logger = logger
        self._dim_threshold = dim_threshold
        self._cells: Dict[GridPosition, str] = {}
        self._visible = True
        self._last_frame: Optional[str] = None

    def set_tile(self, tile: Tile) -> None:
        if tile.alpha < self._dim_threshold and tile.color == TileColor.DEFAULT:
            char = ' '
        elif tile.arrow in _ARROW_CHARS and tile.color == TileColor.PATH:
            char = _ARROW_CHARS[tile.arrow]
        else:
            char = _COLOR_CHARS[tile.color]
        self._cells[tile.position] = char

    def set_visible(self, visible: bool) -> None:
        self._visible = visible

    def clear(self) -> None:
        self._cells.clear()
        self._last_frame = None

    def render_lines(self) -> List[str]:
        if not self._visible or not self._cells:
            return []
        columns = max(pos.x for pos in self._cells) + 1
        rows = max(pos.z for pos in self._cells) + 1
        return [
            ' '.join(self._cells.get(GridPosition(x, z), '?') for x in range(columns))
            for z in range(rows)
        ]

    def show(self) -> None:
        frame = '\n'.join(self.render_lines())
        if frame == self._last_frame:
            return
        self._last_frame = frame
        if frame:
            self._logger.info("Board:\n" + frame)
        else:
            self._logger.info("Board hidden")
