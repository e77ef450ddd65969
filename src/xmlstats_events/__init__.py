"""Daily xmlstats events with a canonical-URL response cache."""

__version__ = "0.1.0"
