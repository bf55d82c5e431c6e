"""Command-line interface for :mod:`statline`."""
