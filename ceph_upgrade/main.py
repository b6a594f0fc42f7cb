import argparse
import os
import sys
import logging

from ceph_upgrade.decorators import catches
from ceph_upgrade.util import str_to_seconds
from ceph_upgrade import log, check, configuration, conf, exceptions, terminal, inventory

logger = logging.getLogger(__name__)


class Upgrade(object):
    _help = """
ceph-upgrade: Check if Ceph daemons can be restarted safely while a cluster
is being upgraded. Decisions are printed on stdout, everything else goes to
stderr and to the log.

Log Path: {log_path}
Ceph Conf: {ceph_path}

{sub_help}
{environ_vars}
{warning}
    """

    def __init__(self, argv=None, parse=True):
        self.mapper = {
            'ok-to-stop': check.OkToStop,
            'ok-to-continue': check.OkToContinue,
            'versions': inventory.Versions,
            'least-version': inventory.LeastVersion,
            'retry-policy': inventory.RetryPolicy,
        }
        self.argv = sys.argv if argv is None else argv
        if parse:
            self.main(self.argv)

    def help(self, warning=False):
        return self._help.format(
            warning='See "ceph-upgrade --help" for full list of options.' if warning else '',
            log_path=conf.log_path,
            ceph_path=self.stat_ceph_conf(),
            sub_help=terminal.subhelp(self.mapper),
            environ_vars=self.get_environ_vars()
        )

    def get_environ_vars(self):
        environ_vars = ["%s=%s" % (k, v) for k, v in sorted(os.environ.items()) if k.startswith('CEPH_')]
        if not environ_vars:
            return ''
        return '\n'.join(['\nEnviron Variables:'] + environ_vars)

    def stat_ceph_conf(self):
        try:
            configuration.load(conf.path)
        except exceptions.ConfigurationError as error:
            return terminal.red(error)
        return terminal.green(conf.path)

    def _get_split_args(self):
        """
        Global flags come before the sub-command, everything after it
        belongs to the sub-command.
        """
        args = self.argv[1:]
        for count, arg in enumerate(args):
            if arg in self.mapper:
                return args[:count], args[count:]
        return args, []

    def _build_parser(self):
        parser = argparse.ArgumentParser(
            prog='ceph-upgrade',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.help(),
        )
        parser.add_argument(
            '--cluster',
            default='ceph',
            help='Cluster name (defaults to "ceph")',
        )
        parser.add_argument(
            '--log-level',
            default='debug',
            choices=['debug', 'info', 'warning', 'error', 'critical'],
            help='Change the file log level (defaults to debug)',
        )
        parser.add_argument(
            '--log-path',
            default='/var/log/ceph/',
            help='Change the log path (defaults to /var/log/ceph)',
        )
        parser.add_argument(
            '--osd-upgrade-timeout',
            default=None,
            help='How long an osd ok-to-stop check is retried, e.g. 600 or 10m (defaults to 10m)',
        )
        parser.add_argument(
            '-v', '--verbose',
            action='count',
            default=0,
            help='Also send the log messages to the terminal, twice to include debug '
                 'messages and the output of every ceph command',
        )
        return parser

    def _setup_logging(self, args):
        conf.log_path = args.log_path
        if os.path.isdir(conf.log_path):
            conf.log_path = os.path.join(args.log_path, 'ceph-upgrade.log')
        log.setup(log_level=args.log_level)
        conf.verbosity = args.verbose
        if conf.verbosity:
            log.setup_console(log_level='debug' if conf.verbosity > 1 else 'info')

    def _load_config(self, args):
        configuration.load_ceph_conf_path(cluster_name=args.cluster)
        try:
            conf.ceph = configuration.load(conf.path)
        except exceptions.ConfigurationError as error:
            # the ceph binary has its own ways of finding the cluster
            logger.warning('ignoring inability to load ceph.conf', exc_info=1)
            terminal.warning(str(error))
        else:
            try:
                conf.ceph.is_valid()
            except exceptions.ConfigurationKeyError as error:
                logger.warning('%s: %s', conf.path, error)
        configuration.load_settings()
        # the command line wins over ceph.conf and the environment
        if args.osd_upgrade_timeout:
            conf.osd_upgrade_timeout = str_to_seconds(args.osd_upgrade_timeout)

    @catches()
    def main(self, argv):
        # the help needs these, and it is built before parsing
        configuration.load_ceph_conf_path()
        conf.log_path = os.getenv('CEPH_UPGRADE_LOG_PATH', '/var/log/ceph')
        main_args, subcommand_args = self._get_split_args()
        if len(argv) <= 1:
            print(self.help(warning=True))
            raise SystemExit(0)
        args = self._build_parser().parse_args(main_args)
        self._setup_logging(args)
        logger.info("Running command: ceph-upgrade %s %s", " ".join(main_args), " ".join(subcommand_args))
        self._load_config(args)
        terminal.dispatch(self.mapper, subcommand_args)
        # nothing was dispatched, only global flags were given
        print(self.help(warning=True))
