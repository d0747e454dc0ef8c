from urllib.parse import urlparse, urldefrag

from errors import InvalidURL

DEFAULT_PORTS = {"http": 80, "https": 443}


def canonicalize(raw: str) -> str:
    """Turn raw link text into the absolute URL form used for dedup.

    Drops the fragment, lowercases scheme and host, strips the default port and
    gives an empty path a single ``/``. The query string is kept as-is.
    """
    if not raw or not raw.strip():
        raise InvalidURL("empty url")
    link = raw.strip()
    try:
        clean, _ = urldefrag(link)
        p = urlparse(clean)
        port = p.port
    except ValueError as e:
        raise InvalidURL(f"unparsable url {raw!r}: {e}") from e

    scheme = p.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise InvalidURL(f"not an absolute http(s) url: {raw!r}")
    host = p.hostname
    if not host:
        raise InvalidURL(f"url has no host: {raw!r}")

    netloc = f"[{host}]" if ":" in host else host
    if p.username:
        userinfo = p.username + (f":{p.password}" if p.password else "")
        netloc = f"{userinfo}@{netloc}"
    if port and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    path = p.path or "/"
    normalized = f"{scheme}://{netloc}{path}"
    if p.params:
        normalized += ";" + p.params
    if p.query:
        normalized += "?" + p.query
    return normalized


def domain_of(url: str):
    try:
        return urlparse(url).netloc.lower()
    except ValueError:
        return ""
