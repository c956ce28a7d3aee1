import logging
import threading

from django.db import close_old_connections

logger = logging.getLogger(__name__)

INLINE = "INLINE"
THREAD = "THREAD"
OFF = "OFF"


def run_detached(fn, *args, mode: str = THREAD, name: str = "background-task", **kwargs) -> None:
    """Run ``fn`` without letting its failures reach the caller.

    Modes:
    - INLINE: call now, in the current thread
    - THREAD: call on a daemon thread (non-blocking)
    - OFF: skip entirely
    """
    mode = (mode or INLINE).upper()
    if mode == OFF:
        return

    if mode == THREAD:
        def _run():
            close_old_connections()
            try:
                fn(*args, **kwargs)
            except Exception:
                logger.exception("Background task %s failed", name)
            finally:
                close_old_connections()

        t = threading.Thread(target=_run, name=name, daemon=True)
        t.start()
        return

    try:
        fn(*args, **kwargs)
    except Exception:
        logger.exception("Task %s failed", name)
