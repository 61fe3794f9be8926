import io
import random

import pytest
from rich.console import Console

from board import Board
from config import GameSettings
from game import Game
from ui import Renderer


class FakeKeys:
    """Stands in for KeyReader: hands out one scripted key per tick."""

    def __init__(self, keys=()):
        self.pending = list(keys)
        self.closed = False

    def latest(self):
        if not self.pending:
            return None
        return self.pending.pop(0)


@pytest.fixture
def console(monkeypatch):
    # a dumb TERM makes rich drop cursor control codes
    monkeypatch.setenv("TERM", "xterm-256color")
    return Console(file=io.StringIO(), force_terminal=True, color_system=None, width=80, height=24)


@pytest.fixture
def renderer(console):
    return Renderer(console)


@pytest.fixture
def make_game(renderer):
    def _make(width=10, height=10, keys=(), seed=7, **overrides):
        settings = GameSettings(**{"fruit_count": 0, "worm_length": 4, **overrides}).validate()
        naps = []
        game = Game(settings, Board(width, height), renderer, FakeKeys(keys),
                    rng=random.Random(seed), clock=lambda: 0.0, sleep=naps.append)
        game.naps = naps
        return game
    return _make
