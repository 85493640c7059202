"""Azure Virtual Desktop post-deployment health validation."""

__version__ = "0.1.0"
