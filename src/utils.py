import hashlib
import logging
import os
import re
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_installed_handlers = []


def safe_filename(name: str, suffix=".db") -> str:
    """Filesystem-safe, stable file name for a database name such as ``tree-https://a.com/``."""
    cleaned = re.sub(r"[^0-9a-zA-Z-_.]+", "-", name).strip("-.")
    if cleaned == name and len(cleaned) <= 140:
        return f"{cleaned}{suffix}"
    # lossy cleanup: keep names that collapse to the same text apart
    h = hashlib.sha1(name.encode("utf-8")).hexdigest()[:12]
    if len(cleaned) > 140:
        cleaned = cleaned[:140]
    return f"{cleaned}-{h}{suffix}"


def default_db_name(seed_url: str) -> str:
    return f"tree-{seed_url}"


def db_path_for(output_base, namespace, db_name, create=True):
    """Database file for ``namespace``/``db_name`` under ``output_base``."""
    ns_dir = os.path.join(output_base, safe_filename(namespace, suffix=""))
    if create:
        os.makedirs(ns_dir, exist_ok=True)
    return os.path.join(ns_dir, safe_filename(db_name))


def setup_logging(verbose=False, logfile=None):
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    # calling again replaces the handlers installed last time
    for h in _installed_handlers:
        root_logger.removeHandler(h)
        h.close()
    _installed_handlers.clear()
    formatter = logging.Formatter(LOG_FORMAT)
    # console handler
    ch = logging.StreamHandler()
    ch.setFormatter(formatter)
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    root_logger.addHandler(ch)
    _installed_handlers.append(ch)
    # file handler
    if logfile:
        fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        fh.setFormatter(formatter)
        fh.setLevel(logging.DEBUG)
        root_logger.addHandler(fh)
        _installed_handlers.append(fh)
    # urllib3 connection chatter drowns the crawl log at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return root_logger
