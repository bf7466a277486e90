"""Command line interface for schemamap."""

from schemamap import __version__

__all__ = ["__version__"]
