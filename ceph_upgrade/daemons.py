"""
Daemon types known to the upgrade checks, along with everything that
differs between them: whether a per-instance ``ok-to-stop`` command exists,
where their versions are reported in ``ceph versions``, and how hard a
check should be retried before giving up.
"""
from enum import Enum
from typing import Optional, Union

from ceph_upgrade.exceptions import UnknownDaemonType
from ceph_upgrade.retry import RetryPolicy, retry_policy_for


class DaemonType(str, Enum):
    MON = 'mon'
    MGR = 'mgr'
    MDS = 'mds'
    OSD = 'osd'
    RGW = 'rgw'
    RBD_MIRROR = 'rbd-mirror'
    NFS = 'nfs'

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Union[str, 'DaemonType']) -> 'DaemonType':
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownDaemonType(name)

    @property
    def no_check(self) -> bool:
        """
        These daemons don't have any "ok-to-stop" command implemented:

        - mgr: a standby takes over, the orchestrator never stops the last one
        - rgw: the pod spec has a liveness probe
        - rbd-mirror: can be chained like mds but has no ok-to-stop logic yet
        - nfs: protected by the gateway's own failover
        """
        return self in NO_CHECK_TYPES

    @property
    def inventory_key(self) -> Optional[str]:
        """Key holding this type's versions in the ``ceph versions`` output"""
        if self is DaemonType.NFS:
            return None
        return self.value

    def retry_policy(self, osd_upgrade_timeout: Optional[int] = None) -> RetryPolicy:
        return retry_policy_for(self, osd_upgrade_timeout)


NO_CHECK_TYPES = frozenset([
    DaemonType.MGR,
    DaemonType.RGW,
    DaemonType.RBD_MIRROR,
    DaemonType.NFS,
])

# daemon types with an entry in the version census
VERSIONED_TYPES = tuple(t for t in DaemonType if t.inventory_key is not None)
