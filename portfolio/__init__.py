"""Static portfolio site: blog and devlog generator plus contact relay."""

__version__ = "0.1.0"
