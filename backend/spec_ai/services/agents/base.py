"""Base class for the generation-pass agents."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from ...schemas.agents.trace import ExecutionTrace
from ...schemas.chat import GenerationOutcome
from .llm import GenerationClient, get_generation_client
from .tracing import trace_llm_call

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """Base class for agents that run one generation pass.

    Subclasses build their prompt from the previous stage's output and
    call ``_generate``; the generation client never raises, so neither
    does ``_generate``.
    """

    def __init__(self, llm: Optional[GenerationClient] = None):
        self.llm = llm or get_generation_client()

    @property
    @abstractmethod
    def name(self) -> str:
        """Agent's unique name."""
        pass

    async def _generate(
        self,
        prompt: str,
        trace: Optional[ExecutionTrace] = None,
    ) -> GenerationOutcome:
        """Send ``prompt`` to the LLM and record the call."""
        start_time = time.time()
        outcome = await self.llm.generate(prompt)
        duration_ms = (time.time() - start_time) * 1000

        if outcome.failed:
            logger.warning(f"[{self.name}] Generation failed after {duration_ms:.0f}ms: {outcome.text[:100]}")
        else:
            logger.debug(f"[{self.name}] Generated {len(outcome.text)} chars in {duration_ms:.0f}ms")

        if trace is not None:
            trace_llm_call(trace, self.name, prompt, outcome, duration_ms)

        return outcome
