"""Workflow nodes for the check graph."""

from buildchecker.workflow.nodes.evaluate import Evaluate
from buildchecker.workflow.nodes.execute import Execute
from buildchecker.workflow.nodes.fetch_builds import FetchBuilds
from buildchecker.workflow.nodes.notify import Notify

__all__ = [
    "FetchBuilds",
    "Evaluate",
    "Execute",
    "Notify",
]
