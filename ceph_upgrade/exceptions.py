import os


class UpgradeCheckError(Exception):
    """ Base class for every error raised by the upgrade checks """
    exit_status = 1


class QueryFailure(UpgradeCheckError):
    """
    A query against the cluster failed, or answered that the daemons are not
    healthy yet. These are the errors worth retrying.
    """

    def __init__(self, message, command=None, returncode=None, stderr=None):
        super(QueryFailure, self).__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr

    def __str__(self):
        msg = super(QueryFailure, self).__str__()
        if self.returncode is None:
            return msg
        return '[exit {0}] {1}'.format(self.returncode, msg)


class DecodeFailure(UpgradeCheckError):

    def __init__(self, what, output=None, context=None):
        self.what = what
        self.output = output
        self.context = context

    def __str__(self):
        msg = 'Unable to decode %s output' % self.what
        if self.context:
            return '%s: %s' % (self.context, msg)
        return msg


class ParseFailure(UpgradeCheckError):

    def __init__(self, source, reason=None, context=None):
        self.source = source
        self.reason = reason
        self.context = context

    def __str__(self):
        msg = self.reason or 'failed to parse version from: %r' % self.source
        if self.context:
            return '%s: %s' % (self.context, msg)
        return msg


class DaemonNotReady(QueryFailure):
    """ The cluster answered, but the daemons are not in a ready state yet """
    pass


class UnknownDaemonType(UpgradeCheckError):

    def __init__(self, daemon_type):
        self.daemon_type = daemon_type

    def __str__(self):
        return 'invalid daemon type %s' % self.daemon_type


class EmptyTopology(UpgradeCheckError):
    pass


class RetriesExhausted(UpgradeCheckError):

    def __init__(self, attempts, action=None):
        self.attempts = attempts
        self.action = action

    def __str__(self):
        msg = 'max retries exceeded (%s)' % self.attempts
        if self.action:
            msg = "'%s' %s" % (self.action, msg)
        if self.__cause__ is not None:
            msg = '%s, last error: %s' % (msg, self.__cause__)
        return msg


class NotOkToStop(UpgradeCheckError):
    # the check ran and said no
    exit_status = 3

    def __init__(self, deployment, reason=None):
        self.deployment = deployment
        self.reason = reason

    @property
    def decision(self):
        from ceph_upgrade.upgrade import Decision
        return Decision.BLOCKED

    def __str__(self):
        msg = 'failed to check if %s was ok to stop' % self.deployment
        if self.reason:
            return '%s: %s' % (msg, self.reason)
        return msg


class NotOkToContinue(UpgradeCheckError):
    exit_status = 3

    def __init__(self, deployment, reason=None):
        self.deployment = deployment
        self.reason = reason

    @property
    def decision(self):
        from ceph_upgrade.upgrade import Decision
        return Decision.BLOCKED

    def __str__(self):
        msg = 'failed to check if %s was ok to continue' % self.deployment
        if self.reason:
            return '%s: %s' % (msg, self.reason)
        return msg


class ConfigurationError(UpgradeCheckError):

    def __init__(self, cluster_name='ceph', path='/etc/ceph', abspath=None):
        self.cluster_name = cluster_name
        self.path = path
        self.abspath = abspath or "%s.conf" % os.path.join(self.path, self.cluster_name)

    def __str__(self):
        return 'Unable to load expected Ceph config at: %s' % self.abspath


class ConfigurationKeyError(UpgradeCheckError):

    def __init__(self, section, key):
        self.section = section
        self.key = key

    def __str__(self):
        return 'Unable to find expected configuration key: "%s" from section "%s"' % (
            self.key,
            self.section
        )


def with_context(error, context):
    """
    Build a new error of the same kind as ``error`` with ``context`` in front
    of its message, meant to be raised ``from error``. Only query, decode and
    parse failures carry context.
    """
    if isinstance(error, QueryFailure):
        return type(error)(
            '%s: %s' % (context, error.args[0]),
            command=error.command,
            returncode=error.returncode,
            stderr=error.stderr,
        )
    if getattr(error, 'context', None):
        context = '%s: %s' % (context, error.context)
    if isinstance(error, DecodeFailure):
        return type(error)(error.what, error.output, context=context)
    if isinstance(error, ParseFailure):
        return type(error)(error.source, reason=error.reason, context=context)
    raise TypeError('no context can be added to %s' % type(error).__name__)
