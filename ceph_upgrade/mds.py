import logging
from typing import Any, Dict, Optional

from ceph_upgrade import conf
from ceph_upgrade.exceptions import DaemonNotReady, DecodeFailure
from ceph_upgrade.util import ceph_cli

logger = logging.getLogger(__name__)

READY_STATES = ('up:active', 'up:standby-replay')


def find_fs_name(deployment: str, prefix: Optional[str] = None) -> str:
    """
    MDS deployments are named after the filesystem they serve:

    >>> find_fs_name('rook-ceph-mds-myfs-a', prefix='rook-ceph-mds-')
    'myfs-a'
    >>> find_fs_name('cephfs-a', prefix='rook-ceph-mds-')
    'cephfs-a'
    """
    prefix = conf.mds_deployment_prefix if prefix is None else prefix
    if prefix and deployment.startswith(prefix):
        return deployment[len(prefix):]
    return deployment


def get_filesystem(fs_name: str) -> Dict[str, Any]:
    data = ceph_cli.run_json(['fs', 'get', fs_name], desc='ceph fs get %s' % fs_name)
    if not isinstance(data, dict) or not isinstance(data.get('mdsmap'), dict):
        raise DecodeFailure('ceph fs get %s' % fs_name, data)
    return data


def mds_active_or_standby_replay(fs_name: str) -> None:
    """
    Succeed when at least one MDS of ``fs_name`` is active or in
    standby-replay.

    :raises: :exc:`DaemonNotReady` otherwise, which is retried like any
             other query failure
    """
    fs = get_filesystem(fs_name)
    info = fs['mdsmap'].get('info') or {}
    if not isinstance(info, dict):
        raise DecodeFailure('ceph fs get %s' % fs_name, fs)
    for name, daemon in info.items():
        state = daemon.get('state') if isinstance(daemon, dict) else None
        if state in READY_STATES:
            logger.debug('mds %s of filesystem %s is %s', daemon.get('name', name), fs_name, state)
            return
    raise DaemonNotReady('mds for filesystem %s is not active or standby-replay' % fs_name)
