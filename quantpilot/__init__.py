"""QuantPilot - simulated market feed with an AI trading pilot."""

__version__ = "0.1.0"
