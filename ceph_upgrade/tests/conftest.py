import dataclasses
import json

import pytest

from ceph_upgrade import Config, conf, retry
from ceph_upgrade.exceptions import QueryFailure


class Capture(object):

    def __init__(self, *a, **kw):
        self.a = a
        self.kw = kw
        self.calls = []
        self.return_values = kw.get('return_values', False)
        self.always_returns = kw.get('always_returns', False)

    def __call__(self, *a, **kw):
        self.calls.append({'args': a, 'kwargs': kw})
        if self.always_returns:
            return self.always_returns
        if self.return_values:
            return self.return_values.pop()


class Factory(object):

    def __init__(self, **kw):
        for k, v in kw.items():
            setattr(self, k, v)


class FakeCeph(object):
    """
    Stands in for ``ceph_cli.run``. Responses are registered per command
    (without the ``--format json`` suffix), a list of responses is consumed
    one call at a time and the last one sticks::

        fake_ceph.set('osd ls', [0, 1, 2])
        fake_ceph.set('osd ok-to-stop 1', [QueryFailure('busy'), ''])
    """

    def __init__(self):
        self.responses = {}
        self.calls = []

    def set(self, command, *responses):
        self.responses[command] = list(responses)

    def count(self, command):
        return len([c for c in self.calls if c == command])

    def __call__(self, args, format_json=True, desc=None):
        command = ' '.join(args)
        self.calls.append(command)
        if command not in self.responses:
            raise QueryFailure("failed to run 'ceph %s'. unexpected command" % command, returncode=22)
        responses = self.responses[command]
        response = responses.pop(0) if len(responses) > 1 else responses[0]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return response
        return json.dumps(response)


@pytest.fixture
def capture():
    return Capture()


@pytest.fixture
def fake_ceph(monkeypatch):
    fake = FakeCeph()
    monkeypatch.setattr('ceph_upgrade.util.ceph_cli.run', fake)
    return fake


@pytest.fixture
def fake_sleep(monkeypatch):
    sleep = Capture()
    monkeypatch.setattr(retry.time, 'sleep', sleep)
    return sleep


@pytest.fixture(autouse=True)
def reset_conf(monkeypatch):
    for field in dataclasses.fields(Config):
        monkeypatch.setattr(conf, field.name, field.default)
    for key in ('CEPH_CONF', 'CEPH_UPGRADE_OSD_TIMEOUT', 'CEPH_UPGRADE_MDS_PREFIX',
                'CEPH_UPGRADE_CEPH_BIN', 'CEPH_UPGRADE_DEBUG', 'CEPH_UPGRADE_LOG_PATH'):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def conf_ceph_stub(tmp_path, monkeypatch):
    """
    Write a ceph.conf with the given contents and load it into ``conf.ceph``
    """
    from ceph_upgrade import configuration

    def apply(contents):
        path = tmp_path / 'ceph.conf'
        path.write_text(contents)
        conf.ceph = configuration.load(str(path))
        return conf.ceph
    return apply


def census(mon=None, mgr=None, osd=None, mds=None, rgw=None, rbd_mirror=None):
    """Build a ``ceph versions`` output"""
    data = {
        'mon': mon or {},
        'mgr': mgr or {},
        'osd': osd or {},
        'mds': mds or {},
        'rgw': rgw or {},
        'rbd-mirror': rbd_mirror or {},
    }
    overall = {}
    for entries in data.values():
        for version, count in entries.items():
            overall[version] = overall.get(version, 0) + count
    data['overall'] = overall
    return data


NAUTILUS = 'ceph version 14.2.8 (2d095e947a02261ce61424021bb43bd3022d35cb) nautilus (stable)'
OCTOPUS = 'ceph version 15.2.0 (dc6a0b5c3cbf6a5e1d6d4f20b5ad466d76b96247) octopus (stable)'
OCTOPUS_DEV = 'ceph version 15.0.0-12-g6c8fb92 (6c8fb920cb1d862f36ee852ed849a15f9a50bd68) octopus (dev)'


@pytest.fixture
def make_census():
    return census


def osd_tree(hosts, stray=()):
    """
    Build a ``ceph osd tree`` output from a ``{hostname: [osd ids]}`` mapping
    """
    nodes = [{'id': -1, 'name': 'default', 'type': 'root', 'children': []}]
    host_id = -2
    for hostname, osds in hosts.items():
        nodes[0]['children'].append(host_id)
        nodes.append({'id': host_id, 'name': hostname, 'type': 'host', 'children': list(osds)})
        for osd_id in osds:
            nodes.append({'id': osd_id, 'name': 'osd.%d' % osd_id, 'type': 'osd', 'status': 'up'})
        host_id -= 1
    return {
        'nodes': nodes,
        'stray': [{'id': i, 'name': 'osd.%d' % i, 'type': 'osd'} for i in stray],
    }


@pytest.fixture
def make_osd_tree():
    return osd_tree
