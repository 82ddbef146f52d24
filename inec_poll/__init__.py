"""INEC Poll: election polls with one vote per voter."""

__version__ = "1.0.0"
