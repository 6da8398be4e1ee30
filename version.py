"""Version information for mediaquery."""

__version__ = "0.3.0"
