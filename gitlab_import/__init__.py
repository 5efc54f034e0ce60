"""Import repositories into GitLab as full mirrors."""

__version__ = "1.0.0"
