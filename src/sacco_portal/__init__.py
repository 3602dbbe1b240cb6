"""Client and command-line member portal for a SACCO backend."""

__version__ = "0.1.0"
