"""A small register-based virtual machine for hex-encoded programs, with a command line runner."""

__version__ = "0.1.0"
__all__ = ["cpu", "cli"]