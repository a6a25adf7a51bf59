"""Tracing utilities for debugging and observability."""

import time
from contextlib import contextmanager
from typing import Any, Dict, Generator

from ...schemas.agents.trace import ExecutionTrace, TraceEventType
from ...schemas.chat import GenerationOutcome


def _preview(text: str, limit: int = 100) -> str:
    return text[:limit] + "..." if len(text) > limit else text


@contextmanager
def trace_stage(
    trace: ExecutionTrace,
    stage: str,
) -> Generator[Dict[str, Any], None, None]:
    """Context manager for tracing one pipeline stage.

    Records start/end events and measures duration.

    Args:
        trace: ExecutionTrace to record events to
        stage: Name of the stage being executed

    Yields:
        Dict to populate with result data (for the completion event)
    """
    start_time = time.time()
    result_data: Dict[str, Any] = {}

    trace.add_event(TraceEventType.STAGE_STARTED, agent=stage)

    try:
        yield result_data
        duration_ms = (time.time() - start_time) * 1000
        trace.add_event(
            TraceEventType.STAGE_COMPLETED,
            agent=stage,
            data=result_data,
            duration_ms=duration_ms,
        )
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        trace.add_event(
            TraceEventType.STAGE_FAILED,
            agent=stage,
            data={"error": str(e)},
            duration_ms=duration_ms,
        )
        raise


def trace_llm_call(
    trace: ExecutionTrace,
    agent_name: str,
    prompt: str,
    outcome: GenerationOutcome,
    duration_ms: float = 0,
) -> None:
    """Record a generation pass in the trace.

    Args:
        trace: ExecutionTrace to record to
        agent_name: Name of the agent making the call
        prompt: Prompt that was sent (only a preview is kept)
        outcome: What the generation client returned
        duration_ms: Call duration in milliseconds
    """
    trace.add_event(
        TraceEventType.LLM_CALL,
        agent=agent_name,
        data={
            "prompt_preview": _preview(prompt),
            "response_preview": _preview(outcome.text),
            "failed": outcome.failed,
        },
        duration_ms=duration_ms,
    )


def format_trace_summary(trace: ExecutionTrace) -> str:
    """Format a trace into a human-readable summary.

    Args:
        trace: ExecutionTrace to summarize

    Returns:
        Formatted summary string
    """
    lines = [
        f"Trace {trace.trace_id} ({trace.user_query[:50]}...)",
        f"  Duration: {trace.total_duration_ms:.0f}ms",
        f"  Sources: {trace.sources_succeeded} live, {trace.sources_missing} missing",
        f"  LLM calls: {trace.llm_calls} ({trace.llm_failures} failed)",
        f"  Stages completed: {trace.stages_completed}",
        f"  Repaired: {trace.repaired}",
    ]

    for event in trace.events:
        if event.event_type == TraceEventType.STAGE_FAILED:
            lines.append(f"    - {event.agent} failed: {event.data.get('error')}")

    return "\n".join(lines)
