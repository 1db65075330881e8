"""cmdgate - command execution gatekeeper for the league admin back office."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cmdgate")
except PackageNotFoundError:
    __version__ = "0.0.0+local"
__app_name__ = "cmdgate"
