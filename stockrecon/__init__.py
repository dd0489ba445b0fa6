"""Stock fundamentals aggregation: fetch, score, signal, cache."""

__version__ = "0.1.0"
