#!/usr/bin/env python3
"""
Link Graph Exporter

Dumps a crawled site graph from its database as a JSON file containing nodes,
edges and basic per-domain node counts.

Input: the database written by findconn (<output>/<namespace>/<database>.db)

Output:
 - link_graph.json  -> {"nodes": [...], "edges": [[src,dst],...], "domain_counts": {...}}

Usage:
    findconn-export --output graphs --db "tree-https://example.com" --out-file link_graph.json

Edges are written as stored: a page that links to the same target twice gives
two identical edges.
"""

import argparse
import json
import os
import sys
from collections import defaultdict

from configs import DEFAULT_EDGE_TABLE, DEFAULT_NAMESPACE, DEFAULT_NODE_TABLE
from db import GraphDB
from errors import StoreError
from url_utils import domain_of
from utils import db_path_for


def build_link_graph(db):
    nodes = []
    domain_counts = defaultdict(int)
    for _, url in db.list_nodes():
        nodes.append(url)
        domain_counts[domain_of(url)] += 1

    edges_list = sorted([src, dst] for src, dst in db.list_edges())
    nodes_list = sorted(nodes)
    domain_counts = dict(sorted(domain_counts.items(), key=lambda kv: (-kv[1], kv[0])))

    return {
        'nodes': nodes_list,
        'edges': edges_list,
        'domain_counts': domain_counts,
    }


def write_graph(outpath, graph):
    with open(outpath, 'w', encoding='utf-8') as f:
        json.dump(graph, f, ensure_ascii=False, indent=2)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Export a crawled link graph as JSON')
    parser.add_argument('--output', required=True, help='findconn output dir')
    parser.add_argument('--ns', default=DEFAULT_NAMESPACE)
    parser.add_argument('--db', required=True, help='Database name used for the crawl')
    parser.add_argument('--table', default=DEFAULT_NODE_TABLE)
    parser.add_argument('--relate-table', default=DEFAULT_EDGE_TABLE)
    parser.add_argument('--out-file', default='link_graph.json', help='Output JSON path')
    args = parser.parse_args(argv)

    path = db_path_for(args.output, args.ns, args.db, create=False)
    if not os.path.exists(path):
        print('ERROR: graph database not found:', path, file=sys.stderr)
        return 2

    try:
        with GraphDB(path, args.table, args.relate_table) as db:
            graph = build_link_graph(db)
    except StoreError as e:
        print('ERROR:', e, file=sys.stderr)
        return 2
    write_graph(args.out_file, graph)
    print('Wrote link graph:', args.out_file)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
