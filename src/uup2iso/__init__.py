from importlib.metadata import version

__version__ = version("uup2iso")

APP_NAME = "uup2iso"
