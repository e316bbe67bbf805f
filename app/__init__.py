"""Notification service for the recruitment platform."""
