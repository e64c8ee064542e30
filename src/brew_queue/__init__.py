"""Serialized Homebrew cask task queue with live progress and sudo fallback."""

__version__ = "0.1.0"
