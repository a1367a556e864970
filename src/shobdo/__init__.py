"""shobdo — spaced-repetition vocabulary scheduler."""

from shobdo.consts import VERSION

__version__ = VERSION
