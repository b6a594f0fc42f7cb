from .main import OkToStop, OkToContinue  # noqa
