"""Game Hub: catalog discovery and local engagement tracking for hosted HTML games."""

__version__ = "0.1.0"
