"""APIM provisioning helpers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("apim-provision")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
