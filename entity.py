from enum import Enum
from typing import NamedTuple


class Position(NamedTuple):
    """A terminal cell, 1-based: (column, row)."""
    column: int
    row: int

    def step(self, direction, distance=1):
        dc, dr = direction.value
        return Position(self.column + dc * distance, self.row + dr * distance)


class Direction(Enum):
    # (column delta, row delta); rows grow downwards on a terminal
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self):
        dc, dr = self.value
        return Direction((-dc, -dr))

    def is_perpendicular(self, other):
        return self.value[0] * other.value[0] + self.value[1] * other.value[1] == 0


class Worm:
    """
    The player: an ordered chain of cells, head first.

    segments[0] is the head and segments[-1] the tail. old_tail holds the
    cell dropped by the last move_forward() so the renderer can blank it;
    it is only meaningful for the frame right after that move.
    """

    def __init__(self, head, length, direction=Direction.RIGHT):
        if length < 1:
            raise ValueError("a worm needs at least one segment")
        head = Position(*head)
        # straight chain trailing away from the direction of travel
        self.segments = [head.step(direction.opposite, i) for i in range(length)]
        self.current_direction = direction
        self.old_tail = None

    def __contains__(self, pos):
        return pos in self.segments

    def length(self):
        return len(self.segments)

    @property
    def head(self):
        return self.segments[0]

    @property
    def tail(self):
        return self.segments[-1]

    @property
    def body(self):
        """Every segment except the head."""
        return self.segments[1:]

    def try_set_direction(self, new_direction):
        """Turn 90 degrees; reversals and no-op turns are ignored."""
        if self.current_direction.is_perpendicular(new_direction):
            self.current_direction = new_direction
            return True
        return False

    def move_forward(self):
        self.old_tail = self.segments[-1]
        # shift in place, back to front, so each cell takes its predecessor's spot
        for i in range(len(self.segments) - 1, 0, -1):
            self.segments[i] = self.segments[i - 1]
        self.segments[0] = self.segments[0].step(self.current_direction)

    def grow(self):
        """
        Add one segment behind the tail.

        Right after a move the new segment takes the cell the tail just left,
        so call this before the next move_forward() forgets it.
        """
        if self.old_tail is not None:
            new_seg = self.old_tail
            # the cell is occupied again, nothing to erase
            self.old_tail = None
        elif len(self.segments) > 1:
            before, tail = self.segments[-2], self.segments[-1]
            new_seg = Position(2 * tail.column - before.column, 2 * tail.row - before.row)
        else:
            new_seg = self.tail.step(self.current_direction.opposite)

        self.segments.append(new_seg)
        return new_seg

    def collides_with_self(self):
        return self.head in self.body
