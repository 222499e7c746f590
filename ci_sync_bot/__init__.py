"""Webhook-driven bot that keeps branches in sync and reflects pull requests into Jira."""

__version__ = "0.1.0"
