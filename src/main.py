#!/usr/bin/env python3
"""
findconn - map every link reachable from a seed URL into a graph database

Starting from the seed, each page is stored as a node, each link found on it as
an edge to the linked page's node, and every newly discovered page is fetched
in turn until nothing new turns up. Pages are visited by a fixed-size thread
pool; a URL is only ever stored once per graph.

Storage is a SQLite file per namespace/database under the output directory:
  <output>/<namespace>/<database>.db   (tables: <table>, <relate-table>)

Usage:
  pip install -e .
  findconn -o graphs -u https://example.com --workers 16 --logfile findconn.log --verbose
  findconn -o graphs -u https://example.com -p http://127.0.0.1:8080 --export graph.json

Exit status is 0 when the crawl ran to completion, 2 on startup errors and
130 when a signal stopped the crawl early.
"""

import argparse
import logging
from urllib.parse import urlparse

from configs import (
    DEFAULT_EDGE_TABLE,
    DEFAULT_NAMESPACE,
    DEFAULT_NODE_TABLE,
    DEFAULT_WORKERS,
    REQUEST_TIMEOUT,
    USER_AGENT,
)
from crawler import discover_sites, install_signal_handlers
from db import GraphDB
from download_utils import make_session
from errors import InvalidURL, StoreError
from link_graph_exporter import build_link_graph, write_graph
from url_utils import canonicalize
from utils import db_path_for, default_db_name, setup_logging

EXIT_STARTUP_ERROR = 2
EXIT_INTERRUPTED = 130
# socks needs the optional PySocks extra of requests, which is not installed
PROXY_SCHEMES = ("http", "https")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="findconn",
        description="Finds all connected links (at least ones accessible via GET request) and dumps them into a graph database.",
    )
    parser.add_argument("-o", "--output", required=True, help="The output DB directory")
    parser.add_argument("-u", "--url", required=True, help="The initial site to parse")
    parser.add_argument("-n", "--ns", default=DEFAULT_NAMESPACE, help="The namespace (subdirectory) for the database")
    parser.add_argument("-d", "--db", default=None,
                        help="The database name. Defaults to `tree-{url}` if not specified.")
    parser.add_argument("-t", "--table", default=DEFAULT_NODE_TABLE, help="The table where the urls will be stored")
    parser.add_argument("-r", "--relate-table", default=DEFAULT_EDGE_TABLE, help="The table used for relations")
    parser.add_argument("-p", "--proxy", default=None,
                        help="A proxy so you dont blast your home IP across the web (recommended)")
    parser.add_argument("-w", "--workers", type=int, default=DEFAULT_WORKERS, help="Concurrent page visits")
    parser.add_argument("--timeout", type=float, default=REQUEST_TIMEOUT, help="Per-request timeout in seconds")
    parser.add_argument("--user-agent", default=USER_AGENT)
    parser.add_argument("--export", default=None, help="Write the finished graph as JSON to this path")
    parser.add_argument("--logfile", type=str, default=None, help="Optional rotating logfile path")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose console logging (DEBUG)")
    return parser


def check_proxy(proxy):
    # requests only complains about a bad proxy on first use
    try:
        p = urlparse(proxy)
        p.port  # raises on a non-numeric port
    except ValueError as e:
        raise ValueError(f"bad proxy url {proxy!r}: {e}") from e
    if p.scheme not in PROXY_SCHEMES or not p.hostname:
        raise ValueError(f"bad proxy url {proxy!r}: expected scheme://host[:port]")


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, logfile=args.logfile)

    if args.workers < 1:
        logging.error("--workers must be at least 1")
        return EXIT_STARTUP_ERROR
    try:
        seed = canonicalize(args.url)
    except InvalidURL as e:
        logging.error("Bad seed url: %s", e)
        return EXIT_STARTUP_ERROR
    if args.proxy:
        try:
            check_proxy(args.proxy)
        except ValueError as e:
            logging.error("%s", e)
            return EXIT_STARTUP_ERROR

    db_name = args.db or default_db_name(args.url)
    logging.info("Using db name: %r", db_name)
    logging.debug("Setting up graph database")
    try:
        db = GraphDB(db_path_for(args.output, args.ns, db_name), args.table, args.relate_table)
    except (StoreError, OSError) as e:
        logging.error("Could not open graph database: %s", e)
        return EXIT_STARTUP_ERROR
    logging.debug("Graph database %s set up successfully", db.path)

    session = make_session(user_agent=args.user_agent, proxy=args.proxy)
    install_signal_handlers()
    with db:
        stats = discover_sites(seed, db, session, node_table=args.table, edge_table=args.relate_table,
                               max_workers=args.workers, timeout=args.timeout)
        if args.export:
            write_graph(args.export, build_link_graph(db))
            logging.info("Wrote link graph: %s", args.export)
    if stats.interrupted:
        logging.warning("Crawl interrupted before the traversal finished: %d new pages, %d new links",
                        stats.nodes_created, stats.edges_created)
        return EXIT_INTERRUPTED
    logging.info("Crawl finished: %d new pages, %d new links", stats.nodes_created, stats.edges_created)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
