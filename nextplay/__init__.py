"""Next Play Recovery: youth sports injury tracking API."""

__version__ = "1.0.0"
