import logging
import signal
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from threading import Event, Lock

from claims import ClaimRegistry
from configs import (
    DEFAULT_EDGE_TABLE,
    DEFAULT_NODE_TABLE,
    DEFAULT_WORKERS,
    GRACEFUL_SHUTDOWN_WAIT,
    REQUEST_TIMEOUT,
)
from download_utils import fetch_page
from errors import FetchError, InvalidURL, NodeExists
from link_extractor import extract_links
from url_utils import canonicalize


# Global shutdown event set by signal handler
shutdown_event = Event()


def _signal_handler(signum, frame):
    logging.info("Received signal %s - finishing in-flight pages, no new work will start", signum)
    shutdown_event.set()


def install_signal_handlers():
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


class CrawlStats:
    FIELDS = ("nodes_created", "edges_created", "already_known", "non_textual",
              "fetch_errors", "invalid_links", "failed")

    def __init__(self):
        self.lock = Lock()
        for f in self.FIELDS:
            setattr(self, f, 0)
        # set when a shutdown request cut the crawl short
        self.interrupted = False

    def incr(self, field, n=1):
        with self.lock:
            setattr(self, field, getattr(self, field) + n)

    def as_dict(self):
        with self.lock:
            return {f: getattr(self, f) for f in self.FIELDS}


def discover_sites(seed_url, db, session, node_table=DEFAULT_NODE_TABLE, edge_table=DEFAULT_EDGE_TABLE,
                   max_workers=DEFAULT_WORKERS, timeout=REQUEST_TIMEOUT, registry=None, stop_event=None):
    """Crawl everything reachable from ``seed_url`` into ``db``.

    Each visit persists its page as a node, links it to the page it was found
    on, then fetches it and queues one child visit per extracted link. Visits
    run on a fixed-size thread pool fed from a shared frontier; a failed visit
    is logged and never stops its siblings. Returns once the frontier is empty
    and nothing is in flight.

    Raises ``InvalidURL`` if the seed itself is not a usable URL.
    """
    seed = canonicalize(seed_url)
    registry = registry if registry is not None else ClaimRegistry()
    stop_event = stop_event if stop_event is not None else shutdown_event
    stats = CrawlStats()

    def relate(parent_id, node_id):
        if parent_id is None or node_id is None:
            return
        db.create_edge(edge_table, parent_id, node_id)
        stats.incr("edges_created")

    def visit(url, parent_id):
        try:
            url = canonicalize(url)
        except InvalidURL as e:
            logging.debug("Dropping link: %s", e)
            stats.incr("invalid_links")
            return []

        claim, won = registry.claim(url)
        if not won:
            logging.debug("Url already claimed in this run, skipping: %s", url)
            stats.incr("already_known")
            if parent_id is not None:
                relate(parent_id, claim.wait())
            return []

        node_id = None
        known = False
        try:
            node_id = db.find_node(node_table, url)
            known = node_id is not None
            if not known:
                try:
                    node_id = db.create_node(node_table, url)
                    stats.incr("nodes_created")
                except NodeExists:
                    node_id = db.find_node(node_table, url)
                    known = True
        finally:
            claim.resolve(node_id)

        relate(parent_id, node_id)
        if known:
            logging.debug("Found url that was already searched, skipping: %s", url)
            stats.incr("already_known")
            return []

        try:
            outcome = fetch_page(session, url, timeout=timeout)
        except FetchError as e:
            logging.error("Fetch failed: %s", e)
            stats.incr("fetch_errors")
            return []
        if not outcome.textual:
            stats.incr("non_textual")
            return []

        children = []
        for link in extract_links(outcome.body):
            logging.info("Found url: %s", link)
            children.append((link, node_id))
        return children

    frontier = deque([(seed, None)])
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="visit")
    futures_to_item = {}

    logging.info("Scraping for site linkages from %s ...", seed)
    try:
        while frontier or futures_to_item:
            while frontier and len(futures_to_item) < max_workers and not stop_event.is_set():
                item = frontier.popleft()
                fut = executor.submit(visit, *item)
                futures_to_item[fut] = item

            if stop_event.is_set():
                break

            done, _ = wait(list(futures_to_item), return_when=FIRST_COMPLETED)
            for fut in done:
                url, parent_id = futures_to_item.pop(fut)
                try:
                    children = fut.result()
                except Exception:
                    logging.exception("Visit of %s (parent=%s) failed", url, parent_id)
                    stats.incr("failed")
                    continue
                frontier.extend(children)

        if stop_event.is_set() and (frontier or futures_to_item):
            stats.interrupted = True
            logging.info("Shutdown requested - %d queued urls dropped, waiting for %d in flight",
                         len(frontier), len(futures_to_item))
            wait_deadline = time.time() + GRACEFUL_SHUTDOWN_WAIT
            for fut in list(futures_to_item):
                remaining = max(0.1, wait_deadline - time.time())
                try:
                    fut.result(timeout=remaining)
                except Exception:
                    logging.debug("In-flight visit did not finish before timeout or raised an exception")
    finally:
        # visits past the grace period still write to db, which the caller closes next
        executor.shutdown(wait=True, cancel_futures=True)

    logging.info("Done scraping connections: %s", stats.as_dict())
    return stats
