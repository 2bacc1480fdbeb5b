"""Slack notifications."""
