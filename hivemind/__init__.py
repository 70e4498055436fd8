"""HiveMind: collaborative project tracking core (projects, tasks, points, requests)."""

__version__ = "0.1.0"
