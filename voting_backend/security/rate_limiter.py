# voting_backend/security/rate_limiter.py

import time

# Fixed-window request counter keyed by an identifier string (e.g. "login_<sid>").
# Expired windows are only dropped by cleanup(), which the server runs periodically.


class RateLimiter:
    def __init__(self):
        self.records = {}  # identifier -> {"count": int, "reset_at": float}

    def _now(self):
        # extracted for easier monkeypatching in tests
        return time.time()

    def is_rate_limited(self, identifier, max_requests=5, window_seconds=900):
        """
        Count one request for `identifier`.

        Returns True when the request must be rejected. A rejected request neither
        extends the window nor increments the counter past `max_requests`.
        """
        now = self._now()
        record = self.records.get(identifier)

        if record is None or now > record['reset_at']:
            self.records[identifier] = {'count': 1, 'reset_at': now + window_seconds}
            return False

        if record['count'] >= max_requests:
            return True

        record['count'] += 1
        return False

    def cleanup(self):
        now = self._now()
        for identifier, record in list(self.records.items()):
            if now > record['reset_at']:
                del self.records[identifier]

    def reset(self):
        self.records.clear()
