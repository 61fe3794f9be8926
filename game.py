import time
import random
from enum import Enum

from log import log
from config import ConfigError
from entity import Direction, Position, Worm
from fruit import BoardFullError, FruitField
from ui import FrameSnapshot

DIRECTION_KEYS = {
    'w': Direction.UP,
    'a': Direction.LEFT,
    's': Direction.DOWN,
    'd': Direction.RIGHT,
}
QUIT_KEY = 'q'
RETRY_KEY = 'r'
PAUSE_KEY = 'p'


class GameStatus(Enum):
    PLAYING = "Playing"
    PAUSED = "Paused"
    LOST = "Lost"
    WON = "Won"
    SHOWING_STATS = "Stats"
    EXITING = "Exiting"


LIVE_STATES = (GameStatus.PLAYING, GameStatus.PAUSED)
FINISHED_STATES = (GameStatus.LOST, GameStatus.WON)


def frame_sleep(budget, elapsed):
    """Time left in the frame; an overrun tick sleeps 0, never a negative span."""
    return max(0.0, budget - elapsed)


class RenderStats:
    """Frame timings collected by the loop for the end-of-session summary."""

    def __init__(self):
        self.frames = 0
        self.total_time = 0.0
        self.slowest = 0.0

    def record(self, duration):
        self.frames += 1
        self.total_time += duration
        self.slowest = max(self.slowest, duration)

    @property
    def average(self):
        if not self.frames:
            return 0.0
        return self.total_time / self.frames

    def summary(self):
        return (f"{self.frames} frames, avg {self.average * 1000:.3f}ms, "
                f"slowest {self.slowest * 1000:.3f}ms")


def check_capacity(settings, board):
    """Refuse settings the board cannot hold instead of spinning in placement."""
    needed = settings.fruit_count + settings.worm_length
    if needed > board.capacity:
        raise ConfigError(
            f"{settings.fruit_count} fruit + worm of {settings.worm_length} need {needed} cells, "
            f"the {board.width}x{board.height} board only has {board.capacity}")
    if settings.worm_length > board.width:
        raise ConfigError(
            f"a worm of {settings.worm_length} does not fit across a board {board.width} cells wide")


class Game:
    """
    Owns the worm, the fruit and the status, and runs the fixed-rate loop.

    Each frame: take the newest key, advance the state machine, draw what
    changed, then sleep out the rest of the frame budget.
    """

    def __init__(self, settings, board, renderer, keys, rng=None,
                 clock=time.perf_counter, sleep=time.sleep):
        check_capacity(settings, board)

        self.settings = settings
        self.board = board
        self.renderer = renderer
        self.keys = keys
        self.rng = rng or random.Random()
        self.clock = clock
        self.sleep = sleep

        self.status = GameStatus.PLAYING
        self.worm = None
        self.fruits = None
        self.stats = RenderStats()
        self.frame_count = 0
        self.episodes = 0

        self._fresh_fruit = []
        self._last_elapsed = 0.0
        self._last_sleep = 0.0
        self._input_lost = False

    # --- 状态切换 ---

    def _set_status(self, new_status):
        if new_status is self.status:
            return
        self.status = new_status

        if new_status in FINISHED_STATES:
            won = new_status is GameStatus.WON
            if won:
                log(f"[bold yellow]🏆 Won episode {self.episodes} at length {self.worm.length()}[/]")
            else:
                log(f"[red]💀 Lost episode {self.episodes} at length {self.worm.length()}[/]")
            self.renderer.draw_game_over(self.board, won)
        elif new_status is GameStatus.SHOWING_STATS:
            self.renderer.draw_stats(self.stats, self.settings.frame_budget)

    def start_position(self):
        """Head of the starting chain: tail on the first column, middle row."""
        return Position(self.board.left + self.settings.worm_length - 1, self.board.center.row)

    def new_episode(self):
        self.episodes += 1
        self.worm = Worm(self.start_position(), self.settings.worm_length)
        self._fresh_fruit = []
        try:
            self.fruits = FruitField.populate(
                self.board, self.settings.fruit_count, self.worm.segments,
                self.rng, self.settings.placement)
        except BoardFullError:
            # check_capacity rules this out, but a full board is a win either way
            self.fruits = FruitField(strategy=self.settings.placement)
            self._set_status(GameStatus.WON)
            return

        log(f"[cyan]🐛 Episode {self.episodes}: worm of {self.settings.worm_length}, "
            f"{self.settings.fruit_count} fruit[/]")
        self.renderer.draw_episode(self.board, self.fruits)
        self._set_status(GameStatus.PLAYING)

    def quit(self):
        if self.settings.stats and self.status is not GameStatus.SHOWING_STATS:
            self._set_status(GameStatus.SHOWING_STATS)
        else:
            self._set_status(GameStatus.EXITING)

    # --- 输入 ---

    def handle_key(self, key):
        if key is None:
            return
        if key == QUIT_KEY:
            self.quit()
            return

        if self.status in LIVE_STATES:
            if key == PAUSE_KEY:
                paused = self.status is GameStatus.PAUSED
                self._set_status(GameStatus.PLAYING if paused else GameStatus.PAUSED)
            elif self.status is GameStatus.PLAYING and key in DIRECTION_KEYS:
                self.worm.try_set_direction(DIRECTION_KEYS[key])
        elif self.status in FINISHED_STATES:
            if key == RETRY_KEY:
                self.new_episode()

    # --- 更新 ---

    def occupied_positions(self):
        return set(self.worm.segments) | set(self.fruits)

    def update(self):
        """Advance one tick of play: move, then eat or collide."""
        self.worm.move_forward()
        head = self.worm.head

        index = self.fruits.index_at(head)
        if index is not None:
            self.worm.grow()
            try:
                new_pos = self.fruits.relocate(index, self.board, self.occupied_positions(), self.rng)
            except BoardFullError:
                self._set_status(GameStatus.WON)
                return
            self._fresh_fruit.append(new_pos)
            return

        if not self.board.contains(head):
            self._set_status(GameStatus.LOST)
            return

        if self.worm.collides_with_self():
            self._set_status(GameStatus.LOST)

    def step(self, key=None):
        """Apply one key, then advance play if the worm is moving."""
        self.handle_key(key)
        if self.status is GameStatus.PLAYING:
            self.update()
        return self.status

    # --- 主循环 ---

    def snapshot(self):
        return FrameSnapshot(
            segments=tuple(self.worm.segments),
            old_tail=self.worm.old_tail,
            fresh_fruit=tuple(self._fresh_fruit),
            status=self.status.value,
            frame_time=self._last_elapsed,
            sleep_time=self._last_sleep,
            show_timing=self.settings.stats,
            hud_width=max(0, self.board.width - 2),
            hud_fill=self.board.border_types.horizontal,
        )

    def _next_key(self):
        key = self.keys.latest()
        if self.keys.closed and not self._input_lost:
            self._input_lost = True
            log("[yellow]⚠️ Keyboard input is gone, the game keeps running without it.[/]")
        return key

    def frame(self):
        started = self.clock()
        was_live = self.status in LIVE_STATES

        self.step(self._next_key())

        if self.status in LIVE_STATES:
            self.renderer.draw_frame(self.snapshot())
            self._fresh_fruit = []
            # 旧尾巴只保留一帧
            self.worm.old_tail = None

        elapsed = self.clock() - started
        nap = frame_sleep(self.settings.frame_budget, elapsed)
        if was_live:
            self.stats.record(elapsed)
            self._last_elapsed, self._last_sleep = elapsed, nap
        self.frame_count += 1
        self.sleep(nap)
        return nap

    def run(self):
        self.new_episode()
        while self.status is not GameStatus.EXITING:
            self.frame()
        return self.stats
