USER_AGENT = "findconn/0.1 (+https://example.com)"
REQUEST_TIMEOUT = 20
DEFAULT_WORKERS = 16
DEFAULT_NAMESPACE = "findconn"
DEFAULT_NODE_TABLE = "site"
DEFAULT_EDGE_TABLE = "containslink"
GRACEFUL_SHUTDOWN_WAIT = 10.0  # seconds to wait for in-flight visits on shutdown

# application/* types that still carry text worth scanning for links
TEXTUAL_APPLICATION_TYPES = frozenset([
    "application/json",
    "application/xml",
    "application/javascript",
    "application/ld+json",
    "application/xhtml+xml",
])
