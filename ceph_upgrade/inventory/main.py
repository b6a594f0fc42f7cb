# -*- coding: utf-8 -*-

import argparse
import json

import yaml

from ceph_upgrade import conf, versions
from ceph_upgrade.daemons import DaemonType, VERSIONED_TYPES


def dump(report, fmt):
    if fmt == 'json':
        return json.dumps(report)
    elif fmt == 'json-pretty':
        return json.dumps(report, indent=4, sort_keys=True)
    elif fmt == 'yaml':
        return yaml.safe_dump(report, default_flow_style=False, sort_keys=True).rstrip('\n')
    raise ValueError('unknown format: %s' % fmt)


def add_format_argument(parser):
    parser.add_argument(
        '--format',
        choices=['plain', 'json', 'json-pretty', 'yaml'],
        default='plain',
        help='Output format',
    )


class Versions(object):

    help = "Report the versions running in the cluster, per daemon type"

    def __init__(self, argv):
        self.argv = argv

    def main(self):
        parser = argparse.ArgumentParser(
            prog='ceph-upgrade versions',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.help,
        )
        add_format_argument(parser)
        self.args = parser.parse_args(self.argv)
        self.format_report(versions.get_all_daemon_versions())

    def format_report(self, census):
        if self.args.format != 'plain':
            print(dump(census.to_json(), self.args.format))
            return
        for daemon_type in VERSIONED_TYPES:
            entries = census.for_daemon(daemon_type)
            if not entries:
                continue
            print(daemon_type)
            for version, count in sorted(entries.items()):
                print('  %s: %d' % (version, count))


class LeastVersion(object):

    help = "Show the least up-to-date version of a daemon type"

    def __init__(self, argv):
        self.argv = argv

    def main(self):
        parser = argparse.ArgumentParser(
            prog='ceph-upgrade least-version',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.help,
        )
        parser.add_argument(
            'daemon_type',
            help='Type of the daemon, one of: %s' % ', '.join(t.value for t in VERSIONED_TYPES),
        )
        add_format_argument(parser)
        self.args = parser.parse_args(self.argv)
        version = versions.least_uptodate_version(self.args.daemon_type)
        if self.args.format == 'plain':
            print(version)
        else:
            print(dump(version.to_json(), self.args.format))


class RetryPolicy(object):

    help = "Show how long a daemon type check is retried"

    def __init__(self, argv):
        self.argv = argv

    def main(self):
        parser = argparse.ArgumentParser(
            prog='ceph-upgrade retry-policy',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.help,
        )
        parser.add_argument(
            'daemon_type',
            choices=[t.value for t in DaemonType],
            help='Type of the daemon',
        )
        add_format_argument(parser)
        self.args = parser.parse_args(self.argv)
        policy = DaemonType.from_name(self.args.daemon_type).retry_policy(conf.osd_upgrade_timeout)
        if self.args.format == 'plain':
            if policy.attempts == 1:
                print('%s: 1 attempt' % self.args.daemon_type)
            else:
                print('%s: %d attempts, %ss apart' % (self.args.daemon_type, policy.attempts, policy.delay))
        else:
            print(dump(policy._asdict(), self.args.format))
