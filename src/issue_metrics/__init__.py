"""Issue lifecycle metrics: Age of Issue and Time to Resolve from start/closed dates."""

__version__ = "0.1.0"
