import os
import sys
from ceph_upgrade import terminal
from functools import wraps


def catches(catch=None, handler=None, exit=True):
    """
    Report the exception(s) in ``catch`` (a class or a tuple of classes,
    any ``Exception`` by default) as a one line message on stderr instead of
    a traceback, and exit. ``handler`` gets the exception and its return
    value is used instead when given.

    The exit status is taken from the ``exit_status`` attribute of the
    exception, so that a blocked check can be told apart from a failed one::

        @catches((QueryFailure, NotOkToStop))
        def main():
            ...

    Setting ``CEPH_UPGRADE_DEBUG`` re-raises with the full traceback.
    """
    catch = catch or Exception

    def decorate(f):

        @wraps(f)
        def newfunc(*a, **kw):
            try:
                return f(*a, **kw)
            except catch as e:
                if os.environ.get('CEPH_UPGRADE_DEBUG'):
                    raise
                if handler:
                    return handler(e)
                sys.stderr.write(make_exception_message(e))
                if exit:
                    sys.exit(getattr(e, 'exit_status', 1))
        return newfunc

    return decorate


def make_exception_message(exc):
    """
    ``--> ErrorName: message``, or just the name for exceptions without a
    message.
    """
    message = str(exc)
    if message:
        return '%s %s: %s\n' % (terminal.red_arrow, exc.__class__.__name__, message)
    return '%s %s\n' % (terminal.red_arrow, exc.__class__.__name__)
