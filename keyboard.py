import codecs
import os
import queue
import select
import sys
import threading

from log import log

# 通道关闭标记：读线程退出时放入队列
_CLOSED = object()

POLL_INTERVAL = 0.1


def stdin_key_reader(stream=None, poll_interval=POLL_INTERVAL):
    """
    Build a blocking single-key reader over a tty stream.

    Bytes come straight off the file descriptor, one per call, so select()
    sees every key still waiting.

    The returned callable gives back one lower-cased character, None when
    nothing arrived within `poll_interval` (so the caller can check for a
    stop request) or a multi-byte character is still incomplete, and ""
    once the stream hit EOF.
    """
    stream = stream or sys.stdin
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def read_key():
        fd = stream.fileno()
        ready, _, _ = select.select([fd], [], [], poll_interval)
        if not ready:
            return None
        data = os.read(fd, 1)
        if not data:
            return ""
        key = decoder.decode(data)
        if not key or key in ('\n', '\r'):
            return None
        return key.lower()

    return read_key


# --- 🎮 输入监听核心 (后台线程) ---
class KeyReader:
    """
    Reads keys on a background thread and hands them to the game loop.

    Keys go through an unbounded FIFO, so a burst of presses never blocks
    the reader. The loop calls latest() once per tick: everything buffered
    is drained and only the newest key survives.
    """

    def __init__(self, read_key=None):
        self._read_key = read_key or stdin_key_reader()
        self._queue = queue.Queue()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._pump, name="key-reader", daemon=True)
        self.closed = False

    def start(self):
        self._thread.start()
        return self

    def stop(self, timeout=1.0):
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout)

    def join(self, timeout=None):
        self._thread.join(timeout)

    @property
    def running(self):
        return self._thread.is_alive()

    def _pump(self):
        try:
            while not self._stop.is_set():
                key = self._read_key()
                if key is None:
                    continue
                if key == "":
                    log("[dim]⌨️ Input stream closed.[/]")
                    break
                self._queue.put(key)
        except (OSError, ValueError) as e:
            log(f"[red]❌ Keyboard reader died: {e}[/]")
        finally:
            self._queue.put(_CLOSED)

    def latest(self):
        """Drain the channel and return the newest key, or None."""
        key = None
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is _CLOSED:
                self.closed = True
                continue
            key = item
        return key
