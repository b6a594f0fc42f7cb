'''
Utility functions to call the ceph binary
'''
import json
import logging

from ceph_upgrade import conf, process
from ceph_upgrade.configuration import Conf
from ceph_upgrade.exceptions import DecodeFailure, QueryFailure

logger = logging.getLogger(__name__)


def _conf_value(section, key):
    # conf.ceph is only a Conf once a ceph.conf has been loaded
    if not isinstance(conf.ceph, Conf):
        return None
    return conf.ceph.get_safe(section, key)


def _conf_list(section, key):
    if not isinstance(conf.ceph, Conf):
        return []
    return conf.ceph.get_list(section, key)


def get_cmd(cmd, user=None, keyring=None):
    base_cmd = [
        conf.ceph_bin,
        '--cluster', conf.cluster,
    ]
    user = user or conf.user
    if user:
        base_cmd.extend(['--name', user,])
    keyring = keyring or conf.keyring or _conf_value('global', 'keyring')
    if keyring:
        base_cmd.extend(['--keyring', keyring,])
    if conf.path:
        base_cmd.extend(['--conf', conf.path,])

    mon_hosts = _conf_list('global', 'mon_host')
    if mon_hosts:
        base_cmd.extend(['--mon-host', ','.join(mon_hosts),])
    mon_dns_serv_name = _conf_value('global', 'mon_dns_serv_name')
    if mon_dns_serv_name:
        base_cmd.extend(['--mon-dns-serv-name', mon_dns_serv_name,])

    return base_cmd + list(cmd)


def run(args, format_json=True, desc=None):
    """
    Run a ``ceph`` command and return its stdout as a single string.

    :param args: The ceph arguments, e.g. ``['osd', 'ok-to-stop', '3']``
    :param format_json: Ask ceph for JSON output
    :param desc: Used in the error message instead of the bare command
    :raises: :exc:`QueryFailure` if the command can't run or exits non-zero
    """
    args = list(args)
    if format_json:
        args.extend(['--format', 'json'])
    command = get_cmd(args)
    desc = desc or "ceph %s" % ' '.join(args)
    try:
        stdout, stderr, returncode = process.call(
            command,
            verbose_on_failure=False,
            show_command=conf.verbosity > 1,
            terminal_verbose=conf.verbosity > 1,
        )
    except OSError as error:
        raise QueryFailure("failed to run '%s': %s" % (desc, error), command=command) from error
    if returncode != 0:
        raise QueryFailure(
            "failed to run '%s'. %s" % (desc, '\n'.join(stderr or stdout)),
            command=command,
            returncode=returncode,
            stderr='\n'.join(stderr),
        )
    output = '\n'.join(stdout)
    logger.debug(output)
    return output


def run_json(args, desc=None):
    """
    Like ``run`` but decodes the JSON output.

    :raises: :exc:`DecodeFailure` when the output is not JSON
    """
    output = run(args, format_json=True, desc=desc)
    try:
        return json.loads(output)
    except ValueError as error:
        logger.exception('unable to decode %s output: %r', desc or ' '.join(args), output)
        raise DecodeFailure(desc or "ceph %s" % ' '.join(args), output) from error
