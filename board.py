from dataclasses import dataclass, field

from entity import Position

# the playfield starts one cell in from the border on each side
INTERIOR_ORIGIN = 2


class BoardSizeError(ValueError):
    """The terminal is too small to hold a playfield."""


@dataclass(frozen=True)
class BorderTypes:
    horizontal: str = "─"
    vertical: str = "│"
    top_left: str = "╭"
    top_right: str = "╮"
    bottom_left: str = "╰"
    bottom_right: str = "╯"


@dataclass(frozen=True)
class Board:
    """
    Interior size plus the border around it.

    The border sits on column 1 / width+2 and row 1 / height+2, so the
    legal interior is [2, width+1] x [2, height+1].
    """
    width: int
    height: int
    border_types: BorderTypes = field(default_factory=BorderTypes)

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise BoardSizeError(f"board interior must be at least 1x1, got {self.width}x{self.height}")

    @classmethod
    def from_terminal_size(cls, columns, lines, border_types=None):
        """Fit the board to a terminal, leaving room for the border."""
        if columns is None or lines is None:
            raise BoardSizeError("terminal size is unknown")
        return cls(columns - 2, lines - 2, border_types or BorderTypes())

    @property
    def left(self):
        return INTERIOR_ORIGIN

    @property
    def top(self):
        return INTERIOR_ORIGIN

    @property
    def right(self):
        return self.width + 1

    @property
    def bottom(self):
        return self.height + 1

    @property
    def capacity(self):
        return self.width * self.height

    @property
    def center(self):
        return Position(self.left + (self.width - 1) // 2, self.top + (self.height - 1) // 2)

    def contains(self, pos):
        return self.left <= pos[0] <= self.right and self.top <= pos[1] <= self.bottom

    def cells(self):
        """Every interior cell in row-major order."""
        for row in range(self.top, self.bottom + 1):
            for column in range(self.left, self.right + 1):
                yield Position(column, row)
