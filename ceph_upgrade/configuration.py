import configparser
import contextlib
import logging
import os
import re

from ceph_upgrade import conf, exceptions
from ceph_upgrade.util import str_to_seconds


logger = logging.getLogger(__name__)

UPGRADE_SECTION = 'upgrade'


class _TrimIndentFile(object):
    """
    This is used to take a file-like object and removes any
    leading tabs from each line when it's read. This is important
    because some ceph configuration files include tabs which break
    ConfigParser.
    """
    def __init__(self, fp):
        self.fp = fp

    def readline(self):
        line = self.fp.readline()
        return line.lstrip(' \t')

    def __iter__(self):
        return iter(self.readline, '')


def load_ceph_conf_path(cluster_name='ceph'):
    abspath = '/etc/ceph/%s.conf' % cluster_name
    conf.path = os.getenv('CEPH_CONF', abspath)
    conf.cluster = cluster_name


def load(abspath=None):
    if not abspath or not os.path.exists(abspath):
        raise exceptions.ConfigurationError(abspath=abspath)

    parser = Conf()

    try:
        ceph_file = open(abspath)
        trimmed_conf = _TrimIndentFile(ceph_file)
        with contextlib.closing(ceph_file):
            parser.read_file(trimmed_conf)
            parser.path = abspath
            return parser
    except configparser.Error as error:
        logger.exception('Unable to parse INI-style file: %s' % abspath)
        raise RuntimeError('Unable to read configuration file: %s' % abspath) from error


def load_settings(environ=None):
    """
    Apply the upgrade check settings on top of the defaults in ``conf``. The
    ``[upgrade]`` section of a loaded ceph.conf is read first, environment
    variables win over it::

        [upgrade]
        osd upgrade timeout = 10m
        mds deployment prefix = rook-ceph-mds-

    """
    environ = os.environ if environ is None else environ
    if isinstance(conf.ceph, Conf):
        timeout = conf.ceph.get_safe(UPGRADE_SECTION, 'osd upgrade timeout')
        if timeout:
            conf.osd_upgrade_timeout = str_to_seconds(timeout)
        prefix = conf.ceph.get_safe(UPGRADE_SECTION, 'mds deployment prefix')
        if prefix:
            conf.mds_deployment_prefix = prefix

    if environ.get('CEPH_UPGRADE_OSD_TIMEOUT'):
        conf.osd_upgrade_timeout = str_to_seconds(environ['CEPH_UPGRADE_OSD_TIMEOUT'])
    if environ.get('CEPH_UPGRADE_MDS_PREFIX'):
        conf.mds_deployment_prefix = environ['CEPH_UPGRADE_MDS_PREFIX']
    if environ.get('CEPH_UPGRADE_CEPH_BIN'):
        conf.ceph_bin = environ['CEPH_UPGRADE_CEPH_BIN']
    logger.debug('osd upgrade timeout: %ss, mds deployment prefix: %s',
                 conf.osd_upgrade_timeout, conf.mds_deployment_prefix)


class Conf(configparser.ConfigParser):
    """
    Subclasses from ConfigParser to give a few helpers for Ceph
    configuration.
    """

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('inline_comment_prefixes', ('#', ';'))
        kwargs.setdefault('strict', False)
        super(Conf, self).__init__(*args, **kwargs)
        self.path = None

    def optionxform(self, optionstr):
        # ceph treats "mon host", "mon_host" and "mon-host" as the same key
        return re.sub(r'[ -]+', '_', optionstr.strip().lower())

    def is_valid(self):
        try:
            self.get('global', 'fsid')
        except (configparser.NoSectionError, configparser.NoOptionError):
            raise exceptions.ConfigurationKeyError('global', 'fsid')

    def get_safe(self, section, key, default=None):
        """
        Attempt to get a configuration value from a certain section
        in a ``cfg`` object but returning None if not found. Avoids the need
        to be doing try/except {ConfigParser Exceptions} every time.
        """
        try:
            return self.get(section, self.optionxform(key))
        except (configparser.NoSectionError, configparser.NoOptionError):
            return default

    def get_list(self, section, key, default=None, split=','):
        """
        Assumes that the value for a given key is going to be a list separated
        by commas. If just one item is present it returns a list with a single
        item, if no key is found an empty list is returned.

        Optionally split on other characters besides ',' and return a fallback
        value if no items are found.
        """
        value = self.get_safe(section, key)
        if not value:
            if default is not None:
                return default
            return []

        # strip spaces, and the empty items a trailing separator leaves behind
        return [x.strip() for x in value.split(split) if x.strip()]
