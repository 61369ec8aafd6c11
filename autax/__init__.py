"""AU Tax Engine - Australian tax and superannuation calculators."""

__version__ = "0.4.0"
