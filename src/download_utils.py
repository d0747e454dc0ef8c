import logging
from collections import namedtuple

import requests

from configs import REQUEST_TIMEOUT, TEXTUAL_APPLICATION_TYPES, USER_AGENT
from errors import FetchError


class FetchOutcome(namedtuple("FetchOutcome", ["textual", "content_type", "body"])):
    """Result of a successful GET. ``body`` is None when the page is not textual."""

    @classmethod
    def text(cls, body, content_type="text/plain"):
        return cls(True, content_type, body)

    @classmethod
    def non_textual(cls, content_type):
        return cls(False, content_type, None)


def media_type(content_type):
    """``'Text/HTML; charset=utf-8'`` -> ``'text/html'``."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_textual_content_type(content_type) -> bool:
    mt = media_type(content_type)
    return mt.startswith("text/") or mt in TEXTUAL_APPLICATION_TYPES


def make_session(user_agent=USER_AGENT, proxy=None):
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    if proxy:
        session.proxies.update({"http": proxy, "https": proxy})
    return session


def fetch_page(session, url, timeout=REQUEST_TIMEOUT):
    """GET ``url`` once and return its body if the response is textual.

    The body of a non-textual response is never downloaded.
    """
    try:
        resp = session.get(url, timeout=timeout, stream=True)
    except requests.RequestException as e:
        raise FetchError(url, str(e)) from e
    try:
        status = resp.status_code
        if not 200 <= status < 300:
            raise FetchError(url, f"HTTP {status}", status=status)
        ctype = resp.headers.get("Content-Type", "") or ""
        if not is_textual_content_type(ctype):
            logging.debug("Url %s is content-type %r, expected text. Ignoring.", url, ctype)
            return FetchOutcome.non_textual(ctype)
        try:
            return FetchOutcome.text(resp.text, ctype)
        except requests.RequestException as e:
            raise FetchError(url, f"reading body failed: {e}", status=status) from e
    finally:
        resp.close()
