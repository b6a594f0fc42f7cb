import logging
import time
from typing import Any, Callable, NamedTuple, Optional, TypeVar

from ceph_upgrade import conf
from ceph_upgrade.exceptions import QueryFailure, RetriesExhausted

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_MAX_RETRIES = 10
DEFAULT_RETRY_DELAY = 60  # seconds
DEFAULT_OSD_RETRY_DELAY = 10  # seconds
DEFAULT_MDS_RETRY_DELAY = 15  # seconds


class RetryPolicy(NamedTuple):
    attempts: int
    delay: float


def retry_policy_for(daemon_type: Any, osd_upgrade_timeout: Optional[int] = None) -> RetryPolicy:
    """
    Map a daemon type to the number of attempts and the delay between them.

    OSDs are bounded by the configured upgrade timeout (in seconds) instead of
    a fixed count, with at least one attempt:

    >>> retry_policy_for('osd', 120)
    RetryPolicy(attempts=12, delay=10)
    >>> retry_policy_for('osd', 5)
    RetryPolicy(attempts=1, delay=10)
    >>> retry_policy_for('mds')
    RetryPolicy(attempts=10, delay=15)
    >>> retry_policy_for('rgw')
    RetryPolicy(attempts=10, delay=60)
    """
    daemon_type = str(daemon_type)
    if daemon_type == 'osd':
        if osd_upgrade_timeout is None:
            osd_upgrade_timeout = conf.osd_upgrade_timeout
        attempts = max(int(osd_upgrade_timeout) // DEFAULT_OSD_RETRY_DELAY, 1)
        return RetryPolicy(attempts, DEFAULT_OSD_RETRY_DELAY)
    if daemon_type == 'mds':
        return RetryPolicy(DEFAULT_MAX_RETRIES, DEFAULT_MDS_RETRY_DELAY)
    return RetryPolicy(DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY)


def retry(attempts: int,
          delay: float,
          func: Callable[[], T],
          action: Optional[str] = None,
          _sleeper: Optional[Callable[[float], Any]] = None) -> T:
    """
    Call ``func`` until it succeeds, at most ``attempts`` times, sleeping
    ``delay`` seconds in between. Only query failures are retried, anything
    else is raised right away.

    :param action:    A description used in log messages and in the final error
    :param _sleeper:  The function to use to sleep. Only used for testing.
                      Default time.sleep
    :raises: :exc:`RetriesExhausted` chained to the last query failure
    """
    sleeper = _sleeper or time.sleep
    attempts = max(attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except QueryFailure as error:
            if attempt == attempts:
                raise RetriesExhausted(attempts, action) from error
            logger.info('%sretrying after %ss (attempt %d/%d), last error: %s',
                        '%s: ' % action if action else '', delay, attempt, attempts, error)
            sleeper(delay)
    # unreachable, the loop either returns or raises
    raise RetriesExhausted(attempts, action)
