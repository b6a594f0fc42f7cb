"""
Heuristics on the OSD layout, used to tell small or single host clusters
apart where ``ok-to-stop`` would refuse forever.
"""
import logging
from typing import Any, Dict, List, NamedTuple, Optional

from ceph_upgrade.exceptions import DecodeFailure, EmptyTopology, UpgradeCheckError
from ceph_upgrade.util import ceph_cli

logger = logging.getLogger(__name__)

# below this many OSDs the cluster can't stay healthy with one of them down
MIN_OSDS_FOR_CHECK = 3


class TreeNode(NamedTuple):
    id: int
    name: str
    type: str
    children: List[int]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'TreeNode':
        try:
            return cls(
                id=int(data['id']),
                name=str(data.get('name', '')),
                type=str(data['type']),
                children=[int(c) for c in data.get('children') or []],
            )
        except (KeyError, TypeError, ValueError, AttributeError) as error:
            raise DecodeFailure('ceph osd tree', data) from error


class OsdTree(object):

    def __init__(self, nodes: List[TreeNode], stray: Optional[List[TreeNode]] = None) -> None:
        self.nodes = nodes
        self.stray = stray or []

    @classmethod
    def from_json(cls, data: Any) -> 'OsdTree':
        if not isinstance(data, dict):
            raise DecodeFailure('ceph osd tree', data)
        if data.get('nodes') is None:
            raise EmptyTopology("osd tree not populated, missing 'nodes' field")
        if not isinstance(data['nodes'], list) or not isinstance(data.get('stray') or [], list):
            raise DecodeFailure('ceph osd tree', data)
        return cls(
            [TreeNode.from_json(n) for n in data['nodes']],
            [TreeNode.from_json(n) for n in data.get('stray') or []],
        )

    def hosts(self) -> List[TreeNode]:
        return [node for node in self.nodes if node.type == 'host']


def get_osd_tree() -> OsdTree:
    data = ceph_cli.run_json(['osd', 'tree'], desc='ceph osd tree')
    return OsdTree.from_json(data)


def osd_list() -> List[int]:
    """
    Ids of every OSD in the osdmap, including the ones that are down or out.
    """
    data = ceph_cli.run_json(['osd', 'ls'], desc='ceph osd ls')
    if not isinstance(data, list):
        raise DecodeFailure('ceph osd ls', data)
    try:
        return [int(osd_id) for osd_id in data]
    except (TypeError, ValueError) as error:
        raise DecodeFailure('ceph osd ls', data) from error


def build_host_list(tree: OsdTree) -> List[TreeNode]:
    hosts = tree.hosts()
    if not hosts:
        raise EmptyTopology('no host in crush map yet?')
    return hosts


def all_osds_same_host(osds: Optional[List[int]] = None) -> bool:
    """
    Tell if every OSD lives on a single host. OSDs reported as stray (not
    part of the crush map) are not expected under that host.

    :param osds: The output of ``osd_list`` when the caller already has it
    """
    tree = get_osd_tree()
    if osds is None:
        osds = osd_list()
    hosts = build_host_list(tree)
    if len(hosts) != 1:
        return False
    expected = len(osds) - len(tree.stray)
    return len(hosts[0].children) == expected


def should_skip_osd_check() -> bool:
    """
    OSDs can't be checked with ``ok-to-stop`` when there are less than three
    of them, or when all of them share a host. Failing to find out falls back
    to running the check, never to skipping it.
    """
    try:
        osds = osd_list()
    except UpgradeCheckError as error:
        logger.warning('failed to determine the total number of osds. '
                       'will check if the osd is ok-to-stop anyways. %s', error)
        return False

    if len(osds) < MIN_OSDS_FOR_CHECK:
        logger.warning('the cluster has less than %d osds, not performing upgrade check, '
                       'running in best-effort', MIN_OSDS_FOR_CHECK)
        return True

    try:
        same_host = all_osds_same_host(osds)
    except UpgradeCheckError as error:
        logger.warning('failed to determine if all osds are running on the same host. '
                       'will check if the osd is ok-to-stop anyways. %s', error)
        return False

    if same_host:
        logger.warning('all osds are running on the same host, not performing upgrade check, '
                       'running in best-effort')
        return True
    return False
