from __future__ import annotations

import threading
from typing import Callable


class TimerScheduler:
    """Runs callbacks after a delay on daemon ``threading.Timer`` threads.

    Anything with a ``call_later(delay, callback)`` method returning an object
    with ``cancel()`` can stand in for it.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer
