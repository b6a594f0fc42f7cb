import datetime
import logging
import re

logger = logging.getLogger(__name__)


def as_string(string):
    """
    Ensure that whatever type of string is incoming, it is returned as an
    actual string, versus 'bytes' which Python 3 likes to use.
    """
    if isinstance(string, bytes):
        # we really ignore here if we can't properly decode with utf-8
        return string.decode('utf-8', 'ignore')
    return string


def parse_timedelta(delta):
    """
    Returns a timedelta object represents a duration, the difference
    between two dates or times. A bare integer is a number of seconds.

    >>> parse_timedelta('foo')

    >>> parse_timedelta('10m') == datetime.timedelta(minutes=10)
    True

    >>> parse_timedelta('90') == datetime.timedelta(seconds=90)
    True

    :param delta: The string to process, e.g. '2h', '10m', '30s'.
    :return: The `datetime.timedelta` object or `None` in case of
        a parsing error.
    """
    delta = str(delta).strip()
    if delta.isdigit():
        return datetime.timedelta(seconds=int(delta))
    parts = re.match(r'(?P<seconds>\d+)s$|'
                     r'(?P<minutes>\d+)m$|'
                     r'(?P<hours>\d+)h$',
                     delta,
                     re.IGNORECASE)
    if not parts:
        return None
    args = {name: int(param) for name, param in parts.groupdict().items() if param}
    return datetime.timedelta(**args)


def str_to_seconds(string):
    """
    Parse a duration (see ``parse_timedelta``) into whole seconds, raising
    ``ValueError`` when it can't be understood.
    """
    delta = parse_timedelta(string)
    if delta is None:
        error_msg = "Unable to convert to a duration: '%s'" % str(string)
        logger.error(error_msg)
        raise ValueError(error_msg)
    return int(delta.total_seconds())
