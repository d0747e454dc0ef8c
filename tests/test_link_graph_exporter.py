# tests/test_link_graph_exporter.py
# Tests for src/link_graph_exporter.py

import json
import os

from db import GraphDB
from link_graph_exporter import build_link_graph, main as export_main, write_graph
from utils import db_path_for


def make_sample_graph(path):
    db = GraphDB(path)
    ids = {}
    for u in ['https://a.com/page1', 'https://a.com/page2', 'https://b.com/home', 'https://a.com/page3']:
        ids[u] = db.create_node('site', u)
    db.create_edge('containslink', ids['https://a.com/page1'], ids['https://a.com/page2'])
    db.create_edge('containslink', ids['https://b.com/home'], ids['https://a.com/page3'])
    db.create_edge('containslink', ids['https://b.com/home'], ids['https://a.com/page3'])
    return db


def test_build_link_graph_and_write(tmp_path):
    db = make_sample_graph(str(tmp_path / 'g.db'))
    try:
        graph = build_link_graph(db)
    finally:
        db.close()

    assert graph['nodes'] == sorted([
        'https://a.com/page1', 'https://a.com/page2', 'https://a.com/page3', 'https://b.com/home',
    ])
    # duplicate edges are exported as stored
    assert graph['edges'] == [
        ['https://a.com/page1', 'https://a.com/page2'],
        ['https://b.com/home', 'https://a.com/page3'],
        ['https://b.com/home', 'https://a.com/page3'],
    ]
    assert graph['domain_counts'] == {'a.com': 3, 'b.com': 1}

    outpath = os.path.join(str(tmp_path), 'link_graph.json')
    write_graph(outpath, graph)
    with open(outpath, 'r', encoding='utf-8') as f:
        loaded = json.load(f)
    assert loaded == graph


def test_export_cli(tmp_path):
    path = db_path_for(str(tmp_path), 'findconn', 'tree-https://a.com/')
    make_sample_graph(path).close()
    out = tmp_path / 'out.json'
    rc = export_main(['--output', str(tmp_path), '--db', 'tree-https://a.com/', '--out-file', str(out)])
    assert rc == 0
    data = json.loads(out.read_text(encoding='utf-8'))
    assert len(data['nodes']) == 4
    assert len(data['edges']) == 3


def test_export_cli_missing_db(tmp_path):
    rc = export_main(['--output', str(tmp_path), '--db', 'nope', '--out-file', str(tmp_path / 'x.json')])
    assert rc == 2
    assert not (tmp_path / 'x.json').exists()
