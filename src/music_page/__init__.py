"""Publish a Dropbox music folder as a static HTML listing."""

__version__ = "0.1.0"
