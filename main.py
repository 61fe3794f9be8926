import sys

from rich.panel import Panel

from log import log, set_log_fn, buffered
from config import ConfigError, resolve_settings
from board import Board, BoardSizeError
from game import Game
from keyboard import KeyReader
from terminal import terminal_session, terminal_size
from ui import Renderer, console


def print_banner(settings, board):
    console.print(Panel.fit(
        f"[bold magenta]termworm[/]  [dim]{board.width}x{board.height} board[/]\n"
        f"[dim]Fruit: {settings.fruit_count} | Worm: {settings.worm_length} | "
        f"FPS: {settings.fps} | Placement: {settings.placement}[/]\n"
        f"[dim][W/A/S/D] Move  [P] Pause  [Q] Quit  [R] Retry[/]",
        title="🐛 Ready", border_style="magenta"
    ))


def main(argv=None):
    set_log_fn(console.print)

    # 1. 配置与棋盘
    try:
        settings = resolve_settings(argv)
        board = Board.from_terminal_size(*terminal_size(console))
        keys = KeyReader()
        game = Game(settings, board, Renderer(console), keys)
    except (ConfigError, BoardSizeError) as e:
        log(f"[bold red]❌ ERROR[/] {e}")
        return 2

    print_banner(settings, board)

    # 2. 主循环：终端状态在任何退出路径上都会被恢复
    try:
        with buffered(), terminal_session(console):
            keys.start()
            game.run()
    except KeyboardInterrupt:
        log("\n[yellow]Interrupted.[/]")
    finally:
        keys.stop()

    if settings.stats:
        log(f"[cyan]📊 {game.stats.summary()}[/]")
    console.print("[bold red]👋 Bye![/]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
