# -----------------------------
# File: tests/test_utils.py
# -----------------------------
import os

import pytest

from errors import InvalidURL
from url_utils import canonicalize, domain_of
from utils import db_path_for, default_db_name, safe_filename


def test_canonicalize_drops_fragment_and_lowercases_host():
    a = canonicalize('HTTPS://Example.COM/Path?x=1#frag')
    b = canonicalize('https://example.com/Path?x=1')
    assert a == b == 'https://example.com/Path?x=1'


def test_canonicalize_default_ports_and_empty_path():
    assert canonicalize('http://example.com:80') == 'http://example.com/'
    assert canonicalize('https://example.com:443/a') == 'https://example.com/a'
    assert canonicalize('https://example.com:8443/a') == 'https://example.com:8443/a'
    assert canonicalize('  https://example.com  ') == 'https://example.com/'


@pytest.mark.parametrize('raw', [
    '',
    '   ',
    'not a url',
    '/relative/path',
    '../other?x=1',
    'mailto:me@x.com',
    'javascript:alert(1)',
    'ftp://files.example.com/x',
    'http://[::1',
    'http://example.com:notaport/',
    'https:///nohost',
])
def test_canonicalize_rejects_unusable_input(raw):
    with pytest.raises(InvalidURL):
        canonicalize(raw)


def test_domain_of():
    assert domain_of('https://Sub.Example.com/x') == 'sub.example.com'


def test_safe_filename_stable_and_short():
    u = default_db_name('https://example.com/some/long/path/with spaces/?q=1' + 'x' * 300)
    f1 = safe_filename(u)
    f2 = safe_filename(u)
    assert f1 == f2
    assert f1.endswith('.db')
    assert len(f1) < 200
    assert '/' not in f1


def test_safe_filename_keeps_plain_names():
    assert safe_filename('findconn', suffix='') == 'findconn'
    assert safe_filename('tree-https://a.com/') != safe_filename('tree-https://a.com')


def test_db_path_for_creates_namespace_dir(tmp_path):
    p = db_path_for(str(tmp_path), 'findconn', 'tree-https://a.com/')
    assert os.path.isdir(tmp_path / 'findconn')
    assert os.path.dirname(p) == str(tmp_path / 'findconn')
    q = db_path_for(str(tmp_path), 'other', 'x', create=False)
    assert not os.path.exists(tmp_path / 'other')
    assert q.endswith('x.db')
