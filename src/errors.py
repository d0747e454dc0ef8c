class InvalidURL(ValueError):
    """Raised when link text cannot be turned into an absolute http(s) URL."""


class FetchError(Exception):
    """Network failure, timeout or non-2xx response while fetching a page."""

    def __init__(self, url, reason, status=None):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class StoreError(Exception):
    """Persistence failure in the graph database."""


class NodeExists(StoreError):
    """A node with the same url is already present in the table."""

    def __init__(self, table, url):
        super().__init__(f"{table} already has a node for {url}")
        self.table = table
        self.url = url
