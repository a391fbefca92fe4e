"""Per-day prioritized task lists in the terminal."""

__version__ = "0.1.0"
