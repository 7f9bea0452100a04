"""LangGraph attempt/fallback workflow for a single offer analysis."""

import logging
import operator
from typing import Annotated, Callable, Literal, Optional, TypedDict

from langgraph.graph import StateGraph, END

from offer_engine.errors import AnalysisError, CapabilityUnavailable, EngineUnavailable
from offer_engine.models import AnalysisResult
from offer_engine.transport.base import EngineRequest, EngineTransport

LOGGER = logging.getLogger(__name__)

FALLBACK_NOTE = (
    "\n\nNOTE: Search tool is unavailable. "
    "Use your internal knowledge base for the latest data."
)


class AnalysisState(TypedDict):
    """State passed through the attempt graph."""
    prompt: str
    system_instruction: str
    use_search: bool
    attempts: Annotated[list[str], operator.add]
    result: Optional[AnalysisResult]
    error: Optional[AnalysisError]


class AnalysisWorkflow:
    """
    Two-attempt state machine around the engine transport.

        primary --success--------------------> END
        primary --capability failure---------> fallback --> END
        primary --any other failure----------> END

    The fallback resends the same prompt with search disabled and the system
    instruction amended to rely on the engine's own knowledge. There is never
    a third attempt.
    """

    def __init__(self, transport: EngineTransport, parse: Callable[[str], AnalysisResult]):
        self.transport = transport
        self.parse = parse
        self.graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(AnalysisState)

        workflow.add_node("primary", self._primary_attempt)
        workflow.add_node("fallback", self._fallback_attempt)

        workflow.set_entry_point("primary")
        workflow.add_conditional_edges(
            "primary",
            self._after_primary,
            {
                "fallback": "fallback",
                "done": END
            }
        )
        workflow.add_edge("fallback", END)

        return workflow.compile()

    async def _attempt(self, request: EngineRequest) -> tuple[Optional[AnalysisResult], Optional[AnalysisError]]:
        try:
            text = await self.transport.complete(request)
            return self.parse(text), None
        except AnalysisError as e:
            return None, e

    async def _primary_attempt(self, state: AnalysisState) -> dict:
        request = EngineRequest(
            prompt=state["prompt"],
            system_instruction=state["system_instruction"],
            use_search=state["use_search"],
        )
        result, error = await self._attempt(request)
        if error is not None:
            LOGGER.error("Primary analysis failed (%s): %s", error.kind.value, error.message)
        return {"attempts": ["primary"], "result": result, "error": error}

    def _after_primary(self, state: AnalysisState) -> Literal["fallback", "done"]:
        """Only a rejected optional capability earns a second attempt."""
        if state["use_search"] and isinstance(state["error"], CapabilityUnavailable):
            return "fallback"
        return "done"

    async def _fallback_attempt(self, state: AnalysisState) -> dict:
        LOGGER.info("Retrying without search capability")
        request = EngineRequest(
            prompt=state["prompt"],
            system_instruction=state["system_instruction"] + FALLBACK_NOTE,
            use_search=False,
        )
        result, error = await self._attempt(request)
        if error is not None:
            LOGGER.error("Fallback analysis failed (%s): %s", error.kind.value, error.message)
            if isinstance(error, EngineUnavailable):
                error = EngineUnavailable(f"Analysis failed after fallback: {error.message}")
        return {"attempts": ["fallback"], "result": result, "error": error}

    async def run(self, prompt: str, system_instruction: str, use_search: bool = True) -> AnalysisResult:
        """Run the graph; return the result or raise the final AnalysisError."""
        initial_state: AnalysisState = {
            "prompt": prompt,
            "system_instruction": system_instruction,
            "use_search": use_search,
            "attempts": [],
            "result": None,
            "error": None,
        }

        final_state = await self.graph.ainvoke(initial_state)

        if final_state["result"] is not None:
            return final_state["result"]
        raise final_state["error"]
