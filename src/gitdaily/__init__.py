"""gitdaily - daily commit digests for GitHub repositories."""

__version__ = "0.1.0"
