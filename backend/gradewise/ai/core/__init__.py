# AI Core Module - LLM access and telemetry
from gradewise.ai.core.llm import LLMClient, LLMResponse
from gradewise.ai.core.telemetry import get_tracer, init_telemetry, stage_span

__all__ = [
    # LLM
    "LLMClient", "LLMResponse",
    # Telemetry
    "get_tracer", "init_telemetry", "stage_span",
]
