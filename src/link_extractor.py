import re

# scheme://... up to whitespace, quotes or angle brackets
URL_RE = re.compile(r"""[a-z][a-z0-9+.\-]*://[^\s<>"'`{}|\\^]+""", re.IGNORECASE)

TRAILING_PUNCT = ".,;:!?*"
BRACKETS = {")": "(", "]": "["}


def _trim(candidate: str) -> str:
    # strip sentence punctuation and closing brackets that were never opened
    while candidate:
        last = candidate[-1]
        if last in TRAILING_PUNCT:
            candidate = candidate[:-1]
        elif last in BRACKETS and candidate.count(last) > candidate.count(BRACKETS[last]):
            candidate = candidate[:-1]
        else:
            break
    return candidate


def extract_links(body) -> set:
    """Return the distinct URL-shaped substrings found anywhere in ``body``."""
    if not body:
        return set()
    links = set()
    for m in URL_RE.finditer(body):
        link = _trim(m.group(0))
        # a bare "scheme://" has nothing left to visit
        if link and not link.endswith("://"):
            links.add(link)
    return links
