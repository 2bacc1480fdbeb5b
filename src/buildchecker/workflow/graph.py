"""Graph workflow definition."""

from pydantic_graph import Graph

from buildchecker.core.config import State
from buildchecker.core.log import logger


def create_workflow():
    """Create the check workflow graph.

    FetchBuilds → Evaluate → Execute → [Notify] → End

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building workflow graph")

    from buildchecker.workflow.nodes.evaluate import Evaluate
    from buildchecker.workflow.nodes.execute import Execute
    from buildchecker.workflow.nodes.fetch_builds import FetchBuilds
    from buildchecker.workflow.nodes.notify import Notify

    return Graph(
        nodes=(FetchBuilds, Evaluate, Execute, Notify),
        state_type=State,
    )
