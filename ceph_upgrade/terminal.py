"""
Terminal output for ``ceph-upgrade``. Everything meant for humans goes to
stderr, stdout is kept for the machine readable results (decisions, JSON
and YAML reports) so that callers can consume it directly.
"""
import sys

COLORS = {
    'blue': '\033[34m',
    'green': '\033[92m',
    'yellow': '\033[33m',
    'red': '\033[91m',
    'bold': '\033[1m',
}
RESET = '\033[0m'


def _isatty(stream):
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        # missing or closed stream
        return False


def colorize(string, color):
    """
    Wrap ``string`` in the escape codes of ``color`` when stderr is a
    terminal, return it unchanged otherwise.
    """
    string = str(string)
    if not _isatty(sys.__stderr__):
        return string
    return COLORS[color] + string + RESET


def blue(string):
    return colorize(string, 'blue')


def green(string):
    return colorize(string, 'green')


def yellow(string):
    return colorize(string, 'yellow')


def red(string):
    return colorize(string, 'red')


def bold(string):
    return colorize(string, 'bold')


red_arrow = red('--> ')
blue_arrow = blue('--> ')
green_arrow = green('--> ')
yellow_arrow = yellow('--> ')


class _Write(object):

    def __init__(self, _writer=None, prefix='', suffix='', flush=False):
        # resolved per instance so that a replaced sys.stderr (pytest's
        # capsys) is honoured
        self._writer = _writer or sys.stderr
        self.suffix = suffix
        self.prefix = prefix
        self.flush = flush

    def raw(self, string):
        if not string.endswith('\n'):
            string = '%s\n' % string
        self.write(string)

    def write(self, line):
        self._writer.write(self.prefix + line + self.suffix)
        if self.flush:
            self._writer.flush()


def stdout(msg):
    return _Write(prefix=blue(' stdout: ')).raw(msg)


def stderr(msg):
    return _Write(prefix=yellow(' stderr: ')).raw(msg)


def write(msg):
    return _Write().raw(msg)


def error(msg):
    return _Write(prefix=red_arrow).raw(msg)


def info(msg):
    return _Write(prefix=blue_arrow).raw(msg)


def warning(msg):
    return _Write(prefix=yellow_arrow).raw(msg)


def success(msg):
    return _Write(prefix=green_arrow).raw(msg)


def dispatch(mapper, argv=None):
    """
    Find the first argument naming a sub-command, hand it the rest of the
    arguments and exit once its ``main`` returns.
    """
    argv = sys.argv if argv is None else argv
    for count, arg in enumerate(argv, 1):
        command = mapper.get(arg)
        if command is None:
            continue
        instance = command(argv[count:])
        if hasattr(instance, 'main'):
            instance.main()
            raise SystemExit(0)
        return


def subhelp(mapper):
    """
    One line per sub-command with its ``help`` attribute, sub-commands
    without one are left out.
    """
    lines = [
        "%-24s %s" % (name, command.help)
        for name, command in mapper.items()
        if getattr(command, 'help', None)
    ]
    if not lines:
        return ''
    return "Available subcommands:\n\n%s" % '\n'.join(lines)
