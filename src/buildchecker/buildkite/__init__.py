"""Buildkite build provider."""
