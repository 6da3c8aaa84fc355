"""Stoic Mood: a local mood journal with streaks, insights and exports."""

__version__ = "0.3.0"
