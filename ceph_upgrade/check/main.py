import argparse
import logging

from ceph_upgrade import terminal, upgrade
from ceph_upgrade.daemons import DaemonType

logger = logging.getLogger(__name__)


class Check(object):
    """
    Common argument handling for the per-daemon checks, subclasses implement
    ``check`` and the verb used in messages.
    """

    help = ''
    verb = ''

    def __init__(self, argv):
        self.argv = argv

    def parse(self, prog):
        parser = argparse.ArgumentParser(
            prog=prog,
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.help,
        )
        parser.add_argument(
            'deployment',
            help='Name of the deployment (or unit) running the daemon',
        )
        parser.add_argument(
            'daemon_type',
            choices=[t.value for t in DaemonType],
            help='Type of the daemon',
        )
        parser.add_argument(
            'daemon_name',
            help='Id of the daemon, e.g. "a" for mon.a or "3" for osd.3',
        )
        return parser.parse_args(self.argv)

    def report(self, decision):
        logger.info('%s %s: %s', self.args.deployment, self.verb, decision)
        if decision is upgrade.Decision.ALLOW_BEST_EFFORT:
            terminal.warning('%s is %s in best-effort mode, the cluster is too small to be checked' % (
                self.args.deployment, self.verb))
        else:
            terminal.success('%s is %s' % (self.args.deployment, self.verb))
        print(decision)

    def main(self):
        self.args = self.parse('ceph-upgrade %s' % self.verb.replace(' ', '-'))
        decision = self.check(
            self.args.deployment,
            self.args.daemon_type,
            self.args.daemon_name,
        )
        self.report(decision)


class OkToStop(Check):

    help = 'Check if a daemon can be stopped to be upgraded'
    verb = 'ok to stop'

    def check(self, deployment, daemon_type, daemon_name):
        return upgrade.ok_to_stop(deployment, daemon_type, daemon_name)


class OkToContinue(Check):

    help = 'Check if the upgrade can continue after a daemon was restarted'
    verb = 'ok to continue'

    def check(self, deployment, daemon_type, daemon_name):
        return upgrade.ok_to_continue(deployment, daemon_type, daemon_name)
