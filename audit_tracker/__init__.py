"""Audit Tracker: maker / checker1 / checker2 approval workflow for audit tasks."""

__version__ = "1.0.0"
