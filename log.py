import sys
from contextlib import contextmanager

def _default_log_fn(data, *args, **kwargs):
    """默认日志函数：什么也不做"""
    pass

# 核心存储：使用模块属性确保全局共享
_module = sys.modules[__name__]

_module._log_fn = _default_log_fn

def log(data, *args, **kwargs):
    """
    Send a message to the current log sink.

    Supports:
    - log("message")
    - log("worm length {}", 5)
    - log("[bold red]message[/]")   # rich markup, if the sink understands it
    """
    if args and isinstance(data, str):
        try:
            data = data.format(*args)
        except (IndexError, KeyError, ValueError):
            pass  # keep the raw string
        args = ()

    try:
        _module._log_fn(data, *args, **kwargs)
    except Exception:
        # a broken sink must never take the game loop down with it
        pass

def set_log_fn(fn):
    """
    Install a new log sink, e.g. console.print or print.
    Returns the sink that was active before.
    """
    if not callable(fn):
        raise TypeError("log sink must be callable")

    previous = _module._log_fn
    _module._log_fn = fn
    return previous

def get_log_fn():
    return _module._log_fn

@contextmanager
def buffered():
    """
    Hold every message while the alternate screen owns the terminal,
    then replay them to the previous sink once it is released.
    """
    held = []

    def _hold(data, *args, **kwargs):
        held.append((data, kwargs))

    previous = set_log_fn(_hold)
    try:
        yield held
    finally:
        set_log_fn(previous)
        for data, kwargs in held:
            log(data, **kwargs)
