import logging
import re
import sqlite3
from threading import Lock

from configs import DEFAULT_EDGE_TABLE, DEFAULT_NODE_TABLE
from errors import NodeExists, StoreError

IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_table(name):
    if not name or not IDENT_RE.match(name):
        raise StoreError(f"invalid table name: {name!r}")
    return name


class GraphDB:
    """SQLite-backed site graph: one node table keyed by url, one edge table.

    Node rows are ``(id, url)`` with ``url`` unique. Edge rows are
    ``(id, in, out)`` where ``in`` is the linking page and ``out`` the linked one.
    """

    def __init__(self, path, node_table=DEFAULT_NODE_TABLE, edge_table=DEFAULT_EDGE_TABLE):
        self.path = path
        self.node_table = _check_table(node_table)
        self.edge_table = _check_table(edge_table)
        self.lock = Lock()
        try:
            self.conn = sqlite3.connect(self.path, check_same_thread=False)
            self.conn.execute("PRAGMA foreign_keys = ON")
            self._init_tables()
        except sqlite3.Error as e:
            raise StoreError(f"cannot open graph database {path}: {e}") from e

    def _init_tables(self):
        cur = self.conn.cursor()
        cur.execute(
            f"""
            CREATE TABLE IF NOT EXISTS "{self.node_table}" (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT NOT NULL UNIQUE
            )
            """
        )
        cur.execute(
            f"""
            CREATE TABLE IF NOT EXISTS "{self.edge_table}" (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                "in" INTEGER NOT NULL REFERENCES "{self.node_table}"(id),
                "out" INTEGER NOT NULL REFERENCES "{self.node_table}"(id)
            )
            """
        )
        self.conn.commit()

    def exists(self, table, url) -> bool:
        return self.find_node(table, url) is not None

    def find_node(self, table, url):
        table = _check_table(table)
        with self.lock:
            try:
                cur = self.conn.execute(f'SELECT id FROM "{table}" WHERE url=? LIMIT 1', (url,))
                r = cur.fetchone()
            except sqlite3.Error as e:
                raise StoreError(f"lookup of {url} in {table} failed: {e}") from e
        return r[0] if r else None

    def create_node(self, table, url) -> int:
        table = _check_table(table)
        with self.lock:
            try:
                cur = self.conn.execute(f'INSERT INTO "{table}"(url) VALUES(?)', (url,))
                self.conn.commit()
                return cur.lastrowid
            except sqlite3.IntegrityError as e:
                self.conn.rollback()
                raise NodeExists(table, url) from e
            except sqlite3.Error as e:
                self.conn.rollback()
                raise StoreError(f"failed to create node {url} in {table}: {e}") from e

    def create_edge(self, relation_table, source_id, target_id) -> int:
        relation_table = _check_table(relation_table)
        with self.lock:
            try:
                cur = self.conn.execute(
                    f'INSERT INTO "{relation_table}"("in","out") VALUES(?,?)', (source_id, target_id)
                )
                self.conn.commit()
                return cur.lastrowid
            except sqlite3.Error as e:
                self.conn.rollback()
                raise StoreError(
                    f"failed to relate {source_id}->{target_id} in {relation_table}: {e}"
                ) from e

    def count_nodes(self):
        with self.lock:
            return self.conn.execute(f'SELECT COUNT(*) FROM "{self.node_table}"').fetchone()[0]

    def count_edges(self):
        with self.lock:
            return self.conn.execute(f'SELECT COUNT(*) FROM "{self.edge_table}"').fetchone()[0]

    def list_nodes(self):
        """Return ``(id, url)`` rows ordered by id."""
        with self.lock:
            cur = self.conn.execute(f'SELECT id, url FROM "{self.node_table}" ORDER BY id')
            return cur.fetchall()

    def list_edges(self):
        """Return ``(source_url, target_url)`` rows ordered by edge id."""
        with self.lock:
            cur = self.conn.execute(
                f"""
                SELECT s.url, t.url FROM "{self.edge_table}" e
                JOIN "{self.node_table}" s ON s.id = e."in"
                JOIN "{self.node_table}" t ON t.id = e."out"
                ORDER BY e.id
                """
            )
            return cur.fetchall()

    def close(self):
        try:
            self.conn.close()
        except sqlite3.Error:
            logging.exception("Failed to close graph database: %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
