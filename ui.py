from typing import NamedTuple, Optional, Tuple

from rich.align import Align
from rich.cells import cell_len
from rich.console import Console
from rich.control import Control
from rich.panel import Panel
from rich.table import Table

from entity import Position

# 全局 Console 对象，保证输出统一
console = Console()

WORM_GLYPH = "◉"
FRUIT_GLYPH = "●"
BLANK_GLYPH = " "

WORM_STYLE = "bright_magenta"
FRUIT_STYLE = "green"
BORDER_STYLE = "white"
HUD_STYLE = "dim"


class Write(NamedTuple):
    """Put `text` at a cell; text may span several columns."""
    position: Position
    text: str
    style: Optional[str] = None


class FrameSnapshot(NamedTuple):
    """Immutable view of everything a gameplay frame needs to draw."""
    segments: Tuple[Position, ...]
    old_tail: Optional[Position]
    fresh_fruit: Tuple[Position, ...]
    status: str
    frame_time: float = 0.0
    sleep_time: float = 0.0
    show_timing: bool = False
    # columns the HUD may use on the top border; None draws it unbounded
    hud_width: Optional[int] = None
    hud_fill: str = " "


# --- 纯函数：把状态翻译成写操作 ---

def board_writes(board):
    bt = board.border_types
    right_edge = board.width + 2
    writes = [Write(Position(1, 1), bt.top_left + bt.horizontal * board.width + bt.top_right, BORDER_STYLE)]
    for row in range(board.top, board.bottom + 1):
        writes.append(Write(Position(1, row), bt.vertical, BORDER_STYLE))
        writes.append(Write(Position(right_edge, row), bt.vertical, BORDER_STYLE))
    writes.append(Write(Position(1, board.height + 2),
                        bt.bottom_left + bt.horizontal * board.width + bt.bottom_right, BORDER_STYLE))
    return writes


def fruit_writes(positions):
    return [Write(pos, FRUIT_GLYPH, FRUIT_STYLE) for pos in positions]


def hud_writes(snapshot):
    text = f" Length: {len(snapshot.segments)} | {snapshot.status} "
    if snapshot.show_timing:
        text += f"| Elapsed: {snapshot.frame_time * 1000:.1f}ms | Slept: {snapshot.sleep_time * 1000:.1f}ms "
    if snapshot.hud_width is not None:
        if snapshot.hud_width <= 0:
            return []
        # fixed width: shorter text overwrites the whole previous HUD
        text = text[:snapshot.hud_width].ljust(snapshot.hud_width, snapshot.hud_fill)
    return [Write(Position(3, 1), text, HUD_STYLE)]


def frame_writes(snapshot):
    """
    Cells that changed since the last frame: the vacated tail cell,
    any fruit that just moved, and the worm itself.
    """
    writes = []
    if snapshot.old_tail is not None:
        writes.append(Write(snapshot.old_tail, BLANK_GLYPH))
    writes.extend(fruit_writes(snapshot.fresh_fruit))
    writes.extend(Write(pos, WORM_GLYPH, WORM_STYLE) for pos in snapshot.segments)
    writes.extend(hud_writes(snapshot))
    return writes


def game_over_writes(board, won):
    if won:
        lines = [("🏆 You Won!!", "bold yellow")]
    else:
        lines = [("💀 You Died...", "bold white")]
    lines += [None, None, ("press q to quit", None), None, ("press r to retry", None)]

    total_w = board.width + 2
    row = max(1, (board.height + 2) // 2)
    writes = []
    for line in lines:
        if line is not None:
            text, style = line
            col = max(1, (total_w - cell_len(text)) // 2)
            writes.append(Write(Position(col, row), text, style))
        row += 1
    return writes


def stats_table(stats, frame_budget):
    t = Table(title="📊 Render Stats")
    t.add_column("Metric", style="cyan")
    t.add_column("Value", style="yellow", justify="right")
    t.add_row("Frames rendered", str(stats.frames))
    t.add_row("Total frame time", f"{stats.total_time * 1000:.1f} ms")
    t.add_row("Average frame time", f"{stats.average * 1000:.3f} ms")
    t.add_row("Slowest frame", f"{stats.slowest * 1000:.3f} ms")
    t.add_row("Frame budget", f"{frame_budget * 1000:.1f} ms")
    return t


# --- 输出设备 ---

class Renderer:
    """
    Applies write lists through a single console handle.

    Writes are batched inside the console's buffer context, which flushes
    when the block exits, including on error.
    """

    def __init__(self, out=None):
        self.console = out or console

    def apply(self, writes):
        with self.console:
            for w in writes:
                col, row = w.position
                # Control.move_to is 0-based
                self.console.control(Control.move_to(col - 1, row - 1))
                self.console.out(w.text, style=w.style, highlight=False, end="")

    def clear(self):
        self.console.clear()

    def draw_episode(self, board, fruits):
        """Full draw, once per episode: border and every fruit."""
        self.clear()
        self.apply(board_writes(board) + fruit_writes(fruits))

    def draw_frame(self, snapshot):
        self.apply(frame_writes(snapshot))

    def draw_game_over(self, board, won):
        self.clear()
        self.apply(game_over_writes(board, won))

    def draw_stats(self, stats, frame_budget):
        self.clear()
        self.console.print(Panel(
            Align.center(stats_table(stats, frame_budget)),
            title="🐛 termworm",
            subtitle="[dim]press q to quit[/]",
            border_style="magenta",
        ))
