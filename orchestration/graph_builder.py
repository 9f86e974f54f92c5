from langgraph.graph import StateGraph, END
from typing import Callable

from orchestration.nodes import IngestionDependencies, IngestionNodes
from orchestration.state_schema import IngestionState
from utils.logger import setup_logger

logger = setup_logger("graph_builder")

# Node order; each node may also route to "failed"
PIPELINE = [
    "stage_upload",
    "probe_aspect",
    "optimize_stream",
    "assign_key",
    "store_object",
    "record_metadata",
    "complete"
]


def continue_or_fail(next_node: str) -> Callable[[IngestionState], str]:
    """
    Conditional edge factory: go to ``next_node`` unless the last node failed
    """
    def route(state: IngestionState) -> str:
        if state.get('error') is not None:
            return "failed"
        return next_node

    route.__name__ = f"continue_to_{next_node}"
    return route


def build_ingestion_graph(deps: IngestionDependencies):
    """
    Build the LangGraph workflow for one upload

    Pipeline Flow:
    1. Stage (copy upload to scratch)
    2. Probe (aspect ratio -> orientation)
    3. Optimize (fast start remux)
    4. Name (storage key)
    5. Store (object store write)
    6. Record (metadata update)
    7. Done

    Any step routes to "failed", which ends the run.

    Returns:
        Compiled StateGraph
    """
    nodes = IngestionNodes(deps)
    workflow = StateGraph(IngestionState)

    for name in PIPELINE:
        workflow.add_node(name, getattr(nodes, name))
    workflow.add_node("failed", nodes.failed)

    workflow.set_entry_point(PIPELINE[0])

    for current, following in zip(PIPELINE, PIPELINE[1:]):
        workflow.add_conditional_edges(
            current,
            continue_or_fail(following),
            {
                following: following,
                "failed": "failed"
            }
        )

    workflow.add_edge("complete", END)
    workflow.add_edge("failed", END)

    app = workflow.compile()
    logger.debug("Ingestion graph built")
    return app
