"""
Decide whether a single daemon can be stopped for an upgrade, and whether
an upgrade can move on once a daemon is back.
"""
import logging
from enum import Enum
from typing import Optional, Union

from ceph_upgrade import topology, versions
from ceph_upgrade.daemons import DaemonType
from ceph_upgrade.exceptions import (
    DecodeFailure, NotOkToContinue, NotOkToStop, QueryFailure, RetriesExhausted, with_context,
)
from ceph_upgrade.mds import find_fs_name, mds_active_or_standby_replay
from ceph_upgrade.retry import retry
from ceph_upgrade.util import ceph_cli

logger = logging.getLogger(__name__)

# below this many monitors losing one for the upgrade is accepted
MIN_MONS_FOR_CHECK = 3


class Decision(Enum):
    ALLOW_STRICT = 'allow-strict'
    ALLOW_BEST_EFFORT = 'allow-best-effort'
    BLOCKED = 'blocked'

    def __str__(self):
        return self.value

    @property
    def allowed(self):
        return self is not Decision.BLOCKED


def ok_to_stop(deployment: str,
               daemon_type: Union[str, DaemonType],
               daemon_name: str,
               osd_upgrade_timeout: Optional[int] = None) -> Decision:
    """
    Check if ``daemon_name`` can be stopped without making the cluster
    unavailable. Small clusters where the check can never pass are let
    through in best-effort mode.

    Daemon types without an ok-to-stop command rely on their own failover
    and are allowed as strict: best-effort only flags clusters whose
    topology is too small for the check to mean anything.

    :returns: ``Decision.ALLOW_STRICT`` or ``Decision.ALLOW_BEST_EFFORT``
    :raises: :exc:`NotOkToStop` when the cluster keeps refusing
    """
    daemon_type = DaemonType.from_name(daemon_type)
    policy = daemon_type.retry_policy(osd_upgrade_timeout)

    try:
        census = versions.get_all_daemon_versions()
    except (QueryFailure, DecodeFailure) as error:
        context = 'failed to get ceph daemons versions while checking %s' % deployment
        logger.error(context)
        raise with_context(error, context) from error

    if daemon_type is DaemonType.MON:
        mons = census.for_daemon(DaemonType.MON)
        # all mons on one version: a count below the minimum means a small cluster
        if len(mons) == 1 and next(iter(mons.values())) < MIN_MONS_FOR_CHECK:
            logger.info('the cluster has less than %d monitors, not performing upgrade check, '
                        'running in best-effort', MIN_MONS_FOR_CHECK)
            return Decision.ALLOW_BEST_EFFORT
    elif daemon_type is DaemonType.OSD:
        if topology.should_skip_osd_check():
            return Decision.ALLOW_BEST_EFFORT

    try:
        retry(
            policy.attempts,
            policy.delay,
            lambda: ok_to_stop_daemon(deployment, daemon_type, daemon_name),
            action='%s ok-to-stop' % deployment,
        )
    except RetriesExhausted as error:
        raise NotOkToStop(deployment, error.__cause__) from error
    return Decision.ALLOW_STRICT


def ok_to_stop_daemon(deployment: str, daemon_type: DaemonType, daemon_name: str) -> None:
    """
    Ask the cluster once. Daemon types without an ``ok-to-stop`` command
    always pass.
    """
    daemon_type = DaemonType.from_name(daemon_type)
    if daemon_type.no_check:
        logger.debug('deployment %s is ok to be updated, %s daemons are not checked',
                     deployment, daemon_type)
        return

    try:
        output = ceph_cli.run([daemon_type.value, 'ok-to-stop', daemon_name])
    except QueryFailure as error:
        raise QueryFailure(
            'deployment %s cannot be stopped. %s' % (deployment, error.args[0]),
            command=error.command,
            returncode=error.returncode,
            stderr=error.stderr,
        ) from error
    logger.debug('deployment %s is ok to be updated. %s', deployment, output)


def ok_to_continue(deployment: str,
                   daemon_type: Union[str, DaemonType],
                   daemon_name: str) -> Decision:
    """
    Check if the upgrade can proceed to the next daemon after ``daemon_name``
    has been restarted. Only MDS daemons need to be waited on.

    :raises: :exc:`NotOkToContinue` when the filesystem stays unavailable
    """
    daemon_type = DaemonType.from_name(daemon_type)
    if daemon_type is DaemonType.MDS:
        policy = daemon_type.retry_policy()
        try:
            retry(
                policy.attempts,
                policy.delay,
                lambda: ok_to_continue_mds_daemon(deployment, daemon_name),
                action='%s ok-to-continue' % deployment,
            )
        except RetriesExhausted as error:
            raise NotOkToContinue(deployment, error.__cause__) from error
    return Decision.ALLOW_STRICT


def ok_to_continue_mds_daemon(deployment: str, daemon_name: str) -> None:
    fs_name = find_fs_name(deployment)
    logger.debug('checking filesystem %s after mds %s restarted', fs_name, daemon_name)
    mds_active_or_standby_replay(fs_name)


def enable_messenger2() -> None:
    """Enable the msgr2 protocol on the monitors"""
    try:
        ceph_cli.run(['mon', 'enable-msgr2'], format_json=False)
    except QueryFailure as error:
        raise QueryFailure(
            'failed to enable msgr2 protocol. %s' % error.args[0],
            command=error.command,
            returncode=error.returncode,
            stderr=error.stderr,
        ) from error
    logger.info('successfully enabled msgr2 protocol')


def enable_release_osd_functionality(release: str) -> None:
    """
    Disallow OSDs older than ``release`` from joining the cluster, which
    unlocks the features of that release.
    """
    try:
        ceph_cli.run(['osd', 'require-osd-release', release], format_json=False)
    except QueryFailure as error:
        raise QueryFailure(
            'failed to disallow pre-%s osds and enable all new %s-only functionality. %s' % (
                release, release, error.args[0]),
            command=error.command,
            returncode=error.returncode,
            stderr=error.stderr,
        ) from error
    logger.info('successfully disallowed pre-%s osds and enabled all new %s-only functionality',
                release, release)
