"""Site response cache for published micro-sites."""

__version__ = "0.1.0"
