"""schemaledger — apply ordered migrations exactly once, and notice when they change."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("schemaledger")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
