import time
import threading
from collections import deque


class RateLimiter:
    """
    Thread-safe rate limiter context manager.
    Ensures the guarded block runs at most `calls` times in any `period` seconds.
    Callers that hit the limit sleep while holding the lock, so waiting
    threads are released one at a time in arrival order.
    """
    def __init__(self, calls=10, period=60, clock=time.monotonic, sleep=time.sleep):
        if calls < 1:
            raise ValueError("calls must be at least 1")
        self.calls = calls
        self.period = period
        self.timestamps = deque()
        self.lock = threading.Lock()
        self._clock = clock
        self._sleep = sleep

    def __enter__(self):
        with self.lock:
            now = self._clock()

            # Drop timestamps outside the window
            while self.timestamps and now - self.timestamps[0] >= self.period:
                self.timestamps.popleft()

            if len(self.timestamps) >= self.calls:
                wait = self.period - (now - self.timestamps[0])
                if wait > 0:
                    self._sleep(wait)
                    now = self._clock()
                self.timestamps.popleft()

            self.timestamps.append(now)
            return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False
