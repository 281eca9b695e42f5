"""Shared application services and the notification channel."""
