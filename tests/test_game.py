import pytest

from config import ConfigError, GameSettings
from board import Board
from entity import Direction, Worm
from fruit import FruitField
from keyboard import KeyReader
from game import Game, GameStatus, RenderStats, check_capacity, frame_sleep
from tests.conftest import FakeKeys


def _place(game, worm, fruits=()):
    game.worm = worm
    game.fruits = FruitField(fruits)


@pytest.fixture
def game(make_game):
    g = make_game()
    g.new_episode()
    return g


def test_new_episode_starts_playing(make_game):
    g = make_game(fruit_count=3)
    g.new_episode()
    assert g.status is GameStatus.PLAYING
    assert g.worm.length() == 4
    assert g.worm.tail == (2, 6)
    assert len(g.fruits) == 3
    assert not set(g.fruits) & set(g.worm.segments)


def test_eating_grows_the_worm_and_moves_the_fruit(game):
    _place(game, Worm((5, 5), 4), [(6, 5)])
    assert game.step() is GameStatus.PLAYING
    assert game.worm.length() == 5
    assert game.worm.head == (6, 5)
    new_fruit = game.fruits[0]
    assert new_fruit != (6, 5)
    assert new_fruit not in game.worm.segments
    assert game.board.contains(new_fruit)


def test_leaving_the_board_loses(game):
    _place(game, Worm((11, 5), 4))
    assert game.step() is GameStatus.LOST


def test_last_interior_column_is_still_legal(game):
    _place(game, Worm((10, 5), 4))
    assert game.step() is GameStatus.PLAYING
    assert game.worm.head == (11, 5)


@pytest.mark.parametrize("direction, head", [
    (Direction.UP, (5, 2)),
    (Direction.LEFT, (2, 5)),
    (Direction.DOWN, (5, 11)),
])
def test_every_wall_loses(game, direction, head):
    _place(game, Worm(head, 1, direction))
    assert game.step() is GameStatus.LOST


def test_biting_itself_loses(game):
    _place(game, Worm((6, 6), 5))
    for key in ('w', 'a'):
        assert game.step(key) is GameStatus.PLAYING
    assert game.step('s') is GameStatus.LOST


def test_filling_the_board_wins(make_game):
    g = make_game(width=4, height=1, worm_length=3, fruit_count=1)
    g.new_episode()
    assert g.worm.segments == [(4, 2), (3, 2), (2, 2)]
    assert list(g.fruits) == [(5, 2)]
    assert g.step() is GameStatus.WON
    assert g.worm.length() == 4


def test_only_the_newest_key_counts(make_game):
    g = make_game()
    g.new_episode()
    _place(g, Worm((5, 5), 3, Direction.UP))
    pending = ['w', 's', 'a']
    g.keys = KeyReader(lambda: pending.pop(0) if pending else "").start()
    g.keys.join(timeout=2)

    g.frame()
    assert g.worm.current_direction is Direction.LEFT
    assert g.worm.head == (4, 5)
    assert g.status is GameStatus.PLAYING


def test_reverse_key_is_ignored(game):
    game.step('a')
    assert game.worm.current_direction is Direction.RIGHT
    assert game.status is GameStatus.PLAYING


def test_pause_freezes_the_worm(game):
    head = game.worm.head
    assert game.step('p') is GameStatus.PAUSED
    game.step('w')
    game.step()
    assert game.worm.head == head
    assert game.worm.current_direction is Direction.RIGHT
    assert game.step('p') is GameStatus.PLAYING
    assert game.worm.head == head.step(Direction.RIGHT)


def test_quit_without_stats_exits(game):
    assert game.step('q') is GameStatus.EXITING


def test_quit_with_stats_shows_them_first(make_game):
    g = make_game(stats=True)
    g.new_episode()
    assert g.step('q') is GameStatus.SHOWING_STATS
    assert g.step('x') is GameStatus.SHOWING_STATS
    assert g.step('q') is GameStatus.EXITING


def test_retry_after_losing(game):
    _place(game, Worm((11, 5), 2))
    game.step()
    assert game.status is GameStatus.LOST
    assert game.step('w') is GameStatus.LOST
    assert game.step('r') is GameStatus.PLAYING
    assert game.episodes == 2
    assert game.worm.length() == 4


def test_quit_from_game_over(game):
    _place(game, Worm((11, 5), 2))
    game.step()
    assert game.step('q') is GameStatus.EXITING


def test_frame_renders_and_forgets_the_old_tail(make_game, console):
    g = make_game(width=30)
    g.new_episode()
    g.frame()
    assert g.worm.old_tail is None
    assert g.frame_count == 1
    assert g.stats.frames == 1
    assert "Length: 4" in console.file.getvalue()


def test_run_until_quit(make_game):
    g = make_game(keys=[None, 'w', None, 'q'])
    stats = g.run()
    assert g.status is GameStatus.EXITING
    assert g.frame_count == 4
    assert stats.frames == 4
    assert len(g.naps) == 4
    assert all(nap == pytest.approx(1 / 30) for nap in g.naps)


def test_overrunning_frame_sleeps_zero(make_game):
    g = make_game(keys=['q'])
    ticks = iter([0.0, 0.5])
    g.clock = lambda: next(ticks)
    g.new_episode()
    assert g.frame() == 0.0
    assert g.naps == [0.0]


@pytest.mark.parametrize("budget, elapsed, expected", [
    (0.033, 0.010, 0.023),
    (0.033, 0.033, 0.0),
    (0.033, 1.0, 0.0),
])
def test_frame_sleep_never_negative(budget, elapsed, expected):
    assert frame_sleep(budget, elapsed) == pytest.approx(expected)


def test_closed_input_keeps_the_game_running(make_game):
    g = make_game()
    g.keys.closed = True
    g.new_episode()
    g.frame()
    g.frame()
    assert g.status is GameStatus.PLAYING


def test_impossible_settings_refuse_to_start(renderer):
    board = Board(4, 2)
    with pytest.raises(ConfigError):
        Game(GameSettings(fruit_count=6, worm_length=3), board, renderer, FakeKeys())
    with pytest.raises(ConfigError):
        check_capacity(GameSettings(fruit_count=0, worm_length=5), board)
    check_capacity(GameSettings(fruit_count=5, worm_length=3), board)


def test_render_stats_average():
    stats = RenderStats()
    assert stats.average == 0.0
    stats.record(0.01)
    stats.record(0.03)
    assert stats.average == pytest.approx(0.02)
    assert stats.slowest == pytest.approx(0.03)
    assert "2 frames" in stats.summary()


def test_worm_stays_distinct_while_playing(make_game):
    g = make_game(width=8, height=8, fruit_count=4, seed=3)
    g.new_episode()
    for key in "wwddsssaaawwd" * 3:
        g.step(key)
        if g.status is not GameStatus.PLAYING:
            break
        assert len(set(g.worm.segments)) == g.worm.length()


def test_snapshot_fits_the_hud_inside_the_top_border(make_game):
    g = make_game(width=12, stats=True)
    g.new_episode()
    hud = g.snapshot()
    assert hud.hud_width == 10
    assert hud.hud_fill == g.board.border_types.horizontal
