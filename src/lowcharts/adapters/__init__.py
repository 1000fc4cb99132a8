"""Adapters between the charting core and the outside world."""
