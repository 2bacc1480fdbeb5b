"""Configuration, logging, data model and shared plumbing."""
