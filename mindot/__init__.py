"""mindot — a minimal dot-matrix terminal reporter for test runs."""

__version__ = "0.3.0"
