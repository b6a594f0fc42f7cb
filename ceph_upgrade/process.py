import logging
import os
import subprocess

from ceph_upgrade import terminal
from ceph_upgrade.util import as_string

logger = logging.getLogger(__name__)

static_locations = (
    '/usr/local/bin',
    '/bin',
    '/usr/bin',
    '/usr/local/sbin',
    '/usr/sbin',
    '/sbin',
)


def which(executable):
    """
    Find the location of an executable, looking in $PATH first and then in
    the usual system locations. If nothing is found the executable is
    returned as-is so that the failure surfaces when it is called.
    """
    def _get_path(executable, locations):
        for location in locations:
            executable_path = os.path.join(location, executable)
            if os.path.exists(executable_path) and os.path.isfile(executable_path):
                return executable_path
        return None

    if os.path.isabs(executable):
        return executable

    path = os.getenv('PATH', '')
    exec_in_path = _get_path(executable, path.split(':'))
    if exec_in_path:
        return exec_in_path
    logger.warning('Executable {} not in PATH: {}'.format(executable, path))

    exec_in_static_locations = _get_path(executable, static_locations)
    if exec_in_static_locations:
        logger.warning('Found executable under {}, please ensure $PATH is set correctly!'.format(
            exec_in_static_locations))
        return exec_in_static_locations
    logger.warning('Executable {} not found on this system'.format(executable))
    return executable


def log_output(descriptor, message, terminal_logging, logfile_logging):
    """
    log output to both the logger and the terminal if terminal_logging is
    enabled
    """
    if not message:
        return
    message = message.strip()
    line = '%s %s' % (descriptor, message)
    if terminal_logging:
        getattr(terminal, descriptor)(message)
    if logfile_logging:
        logger.info(line)


def call(command, **kw):
    """
    Similar to ``subprocess.Popen`` with the following changes:

    * returns stdout, stderr, and exit code (vs. just the exit code)
    * logs the full contents of stderr and stdout (separately) to the file log

    By default, no terminal output is given, not even the command that is going
    to run.

    :param terminal_verbose: Log command output to terminal, defaults to False, and
                             it is forcefully set to True if a return code is non-zero
    :param logfile_verbose: Log stderr/stdout output to log file. Defaults to True
    :param verbose_on_failure: On a non-zero exit status, it will forcefully set logging ON for
                               the terminal. Defaults to True
    :param timeout: Seconds to wait for the command, ``None`` waits forever
    """
    command = list(command)
    command[0] = which(command[0])
    terminal_verbose = kw.pop('terminal_verbose', False)
    logfile_verbose = kw.pop('logfile_verbose', True)
    verbose_on_failure = kw.pop('verbose_on_failure', True)
    show_command = kw.pop('show_command', False)
    timeout = kw.pop('timeout', None)
    command_msg = "Running command: %s" % ' '.join(command)
    logger.info(command_msg)
    if show_command:
        terminal.write(command_msg)

    process = subprocess.Popen(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        close_fds=True,
        **kw
    )

    try:
        stdout_stream, stderr_stream = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        stdout_stream, stderr_stream = process.communicate()
        logger.warning('%s: timeout after %s seconds', command[0], timeout)
    returncode = process.wait()
    stdout = as_string(stdout_stream).splitlines()
    stderr = as_string(stderr_stream).splitlines()

    if returncode != 0:
        # set to true so that we can log the stderr/stdout that callers would
        # do anyway as long as verbose_on_failure is set (defaults to True)
        if verbose_on_failure:
            terminal_verbose = True
        # logfiles aren't disruptive visually, unlike the terminal, so this
        # should always be on when there is a failure
        logfile_verbose = True

    # the following can get a messed up order in the log if the system call
    # returns output with both stderr and stdout intermingled. This separates
    # that.
    for line in stdout:
        log_output('stdout', line, terminal_verbose, logfile_verbose)
    for line in stderr:
        log_output('stderr', line, terminal_verbose, logfile_verbose)
    return stdout, stderr, returncode
