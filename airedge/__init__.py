"""Edge worker, edge API client, token generators and data models for remote task execution."""

__version__ = "0.0.1"