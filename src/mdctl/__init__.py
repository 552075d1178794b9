"""mdctl — markdown content file store and legacy content migration."""

__version__ = "0.4.0"
