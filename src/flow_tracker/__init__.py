"""Flow - per-space application time tracking."""

__version__ = "0.2.0"
