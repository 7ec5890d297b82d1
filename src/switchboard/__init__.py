"""Switchboard: a uniform REST gateway over third-party SaaS APIs."""

__version__ = "0.1.0"
