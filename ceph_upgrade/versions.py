"""
Version census of a running cluster: ``ceph version`` for the monitor the
client talks to and ``ceph versions`` for every daemon, grouped by type.
"""
import functools
import logging
import re
from typing import Any, Dict, List, Optional, Union

from ceph_upgrade.daemons import DaemonType
from ceph_upgrade.exceptions import (
    DecodeFailure, ParseFailure, QueryFailure, UnknownDaemonType, with_context,
)
from ceph_upgrade.util import ceph_cli

logger = logging.getLogger(__name__)

RELEASES = {
    12: 'luminous',
    13: 'mimic',
    14: 'nautilus',
    15: 'octopus',
    16: 'pacific',
    17: 'quincy',
    18: 'reef',
    19: 'squid',
    20: 'tentacle',
}

# e.g. "ceph version 15.0.0-12-g6c8fb92 (6c8fb920cb1d862f36ee852ed849a15f9a50bd68) octopus (dev)"
VERSION_PATTERN = re.compile(
    r'ceph version (?P<major>\d+)\.(?P<minor>\d+)\.(?P<extra>\d+)'
    r'(?:-(?P<build>\d+))?'
    r'(?:-g[0-9a-f]+)?'
    r'(?:\s+\((?P<commit>[0-9a-f]+)\))?'
    r'(?:\s+(?P<release>[a-z]+))?'
)


@functools.total_ordering
class CephVersion(object):
    """
    A parsed ceph version. Versions order on major, minor, extra and build;
    the commit id and release name are informational only.
    """

    def __init__(self, major, minor, extra, build=0, commit_id='', release=None):
        self.major = int(major)
        self.minor = int(minor)
        self.extra = int(extra)
        self.build = int(build or 0)
        self.commit_id = commit_id or ''
        self.release = release or RELEASES.get(self.major, 'unknown')

    @property
    def key(self):
        return (self.major, self.minor, self.extra, self.build)

    def __eq__(self, other):
        if not isinstance(other, CephVersion):
            return NotImplemented
        return self.key == other.key

    def __lt__(self, other):
        if not isinstance(other, CephVersion):
            return NotImplemented
        return self.key < other.key

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return '<CephVersion %d.%d.%d-%d %s>' % (self.key + (self.release,))

    def __str__(self):
        version = 'ceph version %d.%d.%d' % (self.major, self.minor, self.extra)
        if self.build:
            version = '%s-%d' % (version, self.build)
        if self.commit_id:
            version = '%s (%s)' % (version, self.commit_id)
        return '%s %s' % (version, self.release)

    def to_json(self) -> Dict[str, Any]:
        return {
            'major': self.major,
            'minor': self.minor,
            'extra': self.extra,
            'build': self.build,
            'commit_id': self.commit_id,
            'release': self.release,
        }


def extract_ceph_version(src: str) -> CephVersion:
    """
    Pull a :class:`CephVersion` out of the output of ``ceph version`` (or
    any key of ``ceph versions``).

    >>> extract_ceph_version('ceph version 14.2.8 (2d095e947a02261ce61424021bb43bd3022d35cb) nautilus (stable)')
    <CephVersion 14.2.8-0 nautilus>

    :raises: :exc:`ParseFailure` when no version can be found
    """
    if not isinstance(src, str):
        raise ParseFailure(src)
    match = VERSION_PATTERN.search(src)
    if not match:
        raise ParseFailure(src)
    groups = match.groupdict()
    release = groups['release']
    if release not in RELEASES.values():
        # downstream builds put other words here, fall back to the known name
        release = None
    return CephVersion(
        groups['major'],
        groups['minor'],
        groups['extra'],
        build=groups['build'],
        commit_id=groups['commit'],
        release=release,
    )


class DaemonVersions(object):
    """
    The decoded output of ``ceph versions``: for every daemon type, a mapping
    of version string to the number of daemons running it.
    """

    fields = ('mon', 'mgr', 'osd', 'rgw', 'mds', 'rbd-mirror', 'overall')

    def __init__(self, **versions):
        self._versions = {}  # type: Dict[str, Dict[str, int]]
        for field in self.fields:
            self._versions[field] = dict(versions.get(field.replace('-', '_'), None) or {})

    @classmethod
    def from_json(cls, data: Any) -> 'DaemonVersions':
        if not isinstance(data, dict):
            raise DecodeFailure('ceph versions', data)
        kwargs = {}
        for field in cls.fields:
            entries = data.get(field)
            if entries is None:
                continue
            if not isinstance(entries, dict):
                raise DecodeFailure('ceph versions', data)
            for version, count in entries.items():
                if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                    raise DecodeFailure('ceph versions', data)
            kwargs[field.replace('-', '_')] = entries
        return cls(**kwargs)

    def to_json(self) -> Dict[str, Dict[str, int]]:
        return {field: dict(entries) for field, entries in self._versions.items()}

    def for_daemon(self, daemon_type: Union[str, DaemonType]) -> Dict[str, int]:
        """
        :raises: :exc:`UnknownDaemonType` for types without a versions entry
        """
        daemon_type = DaemonType.from_name(daemon_type)
        if daemon_type.inventory_key is None:
            raise UnknownDaemonType(daemon_type.value)
        return self._versions[daemon_type.inventory_key]

    @property
    def overall(self) -> Dict[str, int]:
        return self._versions['overall']

    def __repr__(self):
        return '<DaemonVersions %s>' % self._versions


def get_mon_version() -> CephVersion:
    """
    Version of the monitor answering ``ceph version``, which is the version
    the cluster is running once the monitors have been upgraded.
    """
    output = ceph_cli.run(['version'], format_json=False, desc='ceph version')
    try:
        return extract_ceph_version(output)
    except ParseFailure as error:
        raise with_context(error, 'failed to extract ceph version') from error


def get_all_daemon_versions() -> DaemonVersions:
    data = ceph_cli.run_json(['versions'], desc='ceph versions')
    return DaemonVersions.from_json(data)


def least_uptodate_version(daemon_type: Union[str, DaemonType],
                           versions: Optional[DaemonVersions] = None) -> CephVersion:
    """
    Return the oldest version reported for ``daemon_type``. During an upgrade
    daemons of a type can run more than one version; the oldest one tells
    which features can't be relied on yet.

    :raises: :exc:`UnknownDaemonType` before querying anything for types
             that ``ceph versions`` does not report
    :raises: :exc:`ParseFailure` when no version is reported or one can't be parsed
    """
    daemon_type = DaemonType.from_name(daemon_type)
    if daemon_type.inventory_key is None:
        raise UnknownDaemonType(daemon_type.value)
    if versions is None:
        try:
            versions = get_all_daemon_versions()
        except (QueryFailure, DecodeFailure) as error:
            raise with_context(error, 'failed to get ceph daemons versions') from error
    entries = versions.for_daemon(daemon_type)
    if not entries:
        raise ParseFailure('', reason='no %s versions reported by the cluster' % daemon_type)

    try:
        parsed = [extract_ceph_version(version) for version in entries]  # type: List[CephVersion]
    except ParseFailure as error:
        raise with_context(error, 'failed to extract ceph version') from error
    least = min(parsed)
    if parsed[0] != least:
        logger.warning('%s daemons run more than one version, the oldest is %r',
                       daemon_type, least)
    return least
