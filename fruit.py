import random

from entity import Position


class BoardFullError(Exception):
    """Not enough free interior cells left to place the requested fruit."""


def _free_count(board, occupied):
    taken = sum(1 for pos in occupied if board.contains(pos))
    return board.capacity - taken


def sample_free_cell(board, occupied, rng=None):
    """
    Rejection sampling: draw random interior cells until one is free.
    Gives up right away when the board is already full.
    """
    rng = rng or random
    if _free_count(board, occupied) <= 0:
        raise BoardFullError("no free cell left on the board")

    while True:
        pos = Position(rng.randint(board.left, board.right), rng.randint(board.top, board.bottom))
        if pos not in occupied:
            return pos


def scan_free_cells(board, occupied, count, rng=None):
    """
    Pick `count` distinct free cells in a single row-major pass.

    Each free cell is taken with probability
    (fruit still to place) / (free cells still to visit), so every
    subset of free cells is equally likely and the scan always ends
    with exactly `count` picks.
    """
    rng = rng or random
    remaining_cells = _free_count(board, occupied)
    if count > remaining_cells:
        raise BoardFullError(f"need {count} free cells, only {remaining_cells} left")

    picked = []
    remaining = count
    for pos in board.cells():
        if remaining == 0:
            break
        if pos in occupied:
            continue
        if rng.random() * remaining_cells < remaining:
            picked.append(pos)
            remaining -= 1
        remaining_cells -= 1
    return picked


def _place_scan(board, occupied, count, rng):
    return scan_free_cells(board, occupied, count, rng)


def _place_reject(board, occupied, count, rng):
    if count > _free_count(board, occupied):
        raise BoardFullError(f"need {count} free cells on the board")
    taken = set(occupied)
    picked = []
    for _ in range(count):
        pos = sample_free_cell(board, taken, rng)
        taken.add(pos)
        picked.append(pos)
    return picked


PLACEMENT_STRATEGIES = {
    "scan": _place_scan,
    "reject": _place_reject,
}


class FruitField:
    """The fruit currently on the board; eaten fruit is moved, never removed."""

    def __init__(self, positions=(), strategy="scan"):
        if strategy not in PLACEMENT_STRATEGIES:
            raise ValueError(f"unknown placement strategy: {strategy!r}")
        self.positions = [Position(*p) for p in positions]
        self.strategy = strategy

    @classmethod
    def populate(cls, board, count, occupied, rng=None, strategy="scan"):
        field = cls(strategy=strategy)
        field.positions = PLACEMENT_STRATEGIES[strategy](board, set(occupied), count, rng or random)
        return field

    def __len__(self):
        return len(self.positions)

    def __iter__(self):
        return iter(self.positions)

    def __getitem__(self, index):
        return self.positions[index]

    def __contains__(self, pos):
        return pos in self.positions

    def index_at(self, pos):
        """Index of the fruit sitting on `pos`, or None."""
        for i, fruit in enumerate(self.positions):
            if fruit == pos:
                return i
        return None

    def relocate(self, index, board, occupied, rng=None):
        """Move one fruit to a fresh free cell; BoardFullError if there is none."""
        taken = set(occupied) | set(self.positions)
        new_pos = PLACEMENT_STRATEGIES[self.strategy](board, taken, 1, rng or random)[0]
        self.positions[index] = new_pos
        return new_pos
