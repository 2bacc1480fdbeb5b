"""Teammate directory and commit author resolution."""
