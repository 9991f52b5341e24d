"""Local content editor for a static site: pages, data files and rebuilds."""

__version__ = "0.1.0"
