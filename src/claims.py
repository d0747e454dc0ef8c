from threading import Event, Lock


class Claim:
    """Admission ticket for one canonical URL.

    The branch that won the claim resolves it with the node id once the node is
    persisted (or with None if it failed); every other branch waits on it.
    """

    def __init__(self, url):
        self.url = url
        self.node_id = None
        self._done = Event()

    def resolve(self, node_id):
        if self._done.is_set():
            return
        self.node_id = node_id
        self._done.set()

    @property
    def resolved(self):
        return self._done.is_set()

    def wait(self, timeout=None):
        self._done.wait(timeout)
        return self.node_id


class ClaimRegistry:
    """Run-wide set of claimed canonical URLs with atomic insert-if-absent."""

    def __init__(self):
        self.lock = Lock()
        self._claims = {}

    def claim(self, url):
        """Return ``(claim, won)``; ``won`` is True for exactly one caller per url."""
        with self.lock:
            existing = self._claims.get(url)
            if existing is not None:
                return existing, False
            c = Claim(url)
            self._claims[url] = c
            return c, True

    def __contains__(self, url):
        with self.lock:
            return url in self._claims

    def __len__(self):
        with self.lock:
            return len(self._claims)
