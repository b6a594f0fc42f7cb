from .main import Versions, LeastVersion, RetryPolicy  # noqa
