"""Short links with owner-scoped management and public redirects."""

__version__ = "0.1.0"
