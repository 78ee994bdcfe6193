"""Helpers for the WeCom API: cached tokens, member records and group robot webhooks."""

__version__ = "0.1.0"
__all__ = ["token", "user_info", "webhook"]