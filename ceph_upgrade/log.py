import logging
import os
from ceph_upgrade import terminal
from ceph_upgrade import conf

BASE_FORMAT = "[%(name)s][%(levelname)-6s] %(message)s"
FILE_FORMAT = "[%(asctime)s]" + BASE_FORMAT


class _UpgradeFileHandler(logging.FileHandler):
    """ Marks the handler installed by ``setup`` so it can be replaced """
    pass


def _file_handler(path, fallback):
    try:
        return _UpgradeFileHandler(path)
    except (OSError, IOError) as err:
        # non-root users (or a missing /var/log/ceph) end up in /tmp
        terminal.warning("Falling back to /tmp/ for logging. Can't use %s" % path)
        terminal.warning(str(err))
        conf.log_path = fallback
        return _UpgradeFileHandler(fallback)


def setup(name='ceph-upgrade.log', log_path=None, log_level='debug'):
    """
    Send every log record at ``log_level`` or above to ``log_path`` (the
    configured ``conf.log_path`` by default). Calling it again replaces the
    previous file instead of logging to both.
    """
    log_path = log_path or conf.log_path
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        if isinstance(handler, _UpgradeFileHandler):
            root_logger.removeHandler(handler)
            handler.close()

    fh = _file_handler(log_path, os.path.join('/tmp/', name))
    fh.setLevel(getattr(logging, log_level.upper()))
    fh.setFormatter(logging.Formatter(FILE_FORMAT))
    root_logger.addHandler(fh)


def setup_console(log_level='info'):
    sh = logging.StreamHandler()
    sh.setFormatter(logging.Formatter('[terminal] ' + BASE_FORMAT))
    sh.setLevel(getattr(logging, log_level.upper()))
    logging.getLogger('ceph_upgrade').addHandler(sh)
