import sys
import termios
import tty
from contextlib import contextmanager

from log import log


def terminal_size(console):
    size = console.size
    return size.width, size.height


@contextmanager
def terminal_session(console, stream=None):
    """
    Hold the terminal for one game session.

    Puts stdin in cbreak mode (keys arrive one at a time, no echo),
    switches to the alternate screen and hides the cursor. Everything is
    put back on the way out, whatever the reason for leaving.
    """
    stream = stream or sys.stdin
    fd = stream.fileno()
    old_settings = termios.tcgetattr(fd)

    try:
        tty.setcbreak(fd)
        console.set_alt_screen(True)
        console.show_cursor(False)
        yield console
    finally:
        console.show_cursor(True)
        console.set_alt_screen(False)
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
        try:
            # 丢掉残留在缓冲区里的按键
            termios.tcflush(fd, termios.TCIFLUSH)
        except termios.error as e:
            log(f"[dim]⚠️ Could not flush pending input: {e}[/]")
