"""pydantic-graph workflow for the check command."""
