"""Recruit Portal — job board and role-scoped recruitment dashboards."""

__version__ = "0.1.0"
