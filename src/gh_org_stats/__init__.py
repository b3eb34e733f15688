"""Pull-request statistics for every repository of a GitHub organization."""

__version__ = "0.1.0"
