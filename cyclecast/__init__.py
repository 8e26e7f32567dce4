"""Cyclecast: menstrual cycle prediction from daily logs."""

__version__ = "0.1.0"
