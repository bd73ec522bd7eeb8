"""
Gradewise - Unified LLM Client
Centralized LLM access with telemetry and JSON replies.
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from gradewise.ai.core.telemetry import get_tracer, trace_llm_call
from gradewise.core.config import settings


@dataclass
class LLMResponse:
    """Standardized response from LLM client."""
    content: str
    model: str
    tokens_prompt: int = 0
    tokens_completion: int = 0
    tokens_total: int = 0
    raw_response: Any = None


class LLMClient:
    """
    Unified LLM Client for the evaluation adapters.

    Features:
    - Multi-provider support (OpenAI, Anthropic)
    - Built-in telemetry (OpenTelemetry)
    - JSON-object replies
    - Token usage tracking

    One call per request; retries are left to the caller.
    """

    def __init__(
        self,
        provider: str = None,
        model: str = None,
        temperature: float = 0.3,
        timeout: int = None,
    ):
        """
        Initialize the LLM client.

        Args:
            provider: LLM provider ('openai' or 'anthropic'). Defaults to settings.
            model: Model name. Defaults to settings.
            temperature: Sampling temperature.
            timeout: Request timeout in seconds.
        """
        self.provider = provider or settings.LLM_PROVIDER
        self.model = model or (
            settings.OPENAI_MODEL if self.provider == "openai"
            else settings.ANTHROPIC_MODEL
        )
        self.temperature = temperature
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS

        self._llm = None

    @property
    def llm(self):
        """Lazy-load the LLM instance."""
        if self._llm is None:
            if self.provider == "openai":
                from langchain_openai import ChatOpenAI
                self._llm = ChatOpenAI(
                    model=self.model,
                    api_key=settings.OPENAI_API_KEY,
                    temperature=self.temperature,
                    timeout=self.timeout,
                    max_retries=0,
                )
            else:
                from langchain_anthropic import ChatAnthropic
                self._llm = ChatAnthropic(
                    model=self.model,
                    api_key=settings.ANTHROPIC_API_KEY,
                    temperature=self.temperature,
                    timeout=self.timeout,
                    max_retries=0,
                )
        return self._llm

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        agent_name: str = "LLMClient",
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            prompt: The user prompt.
            system_prompt: Optional system prompt.
            agent_name: Name of the calling adapter (for telemetry).
            json_mode: Ask the provider for a JSON object reply where supported.

        Returns:
            LLMResponse with content and metadata.
        """
        tracer = get_tracer()

        with tracer.start_as_current_span("llm.generate") as span:
            span.set_attribute("llm.model", self.model)
            span.set_attribute("llm.provider", self.provider)
            span.set_attribute("agent.name", agent_name)

            messages = []
            if system_prompt:
                messages.append(SystemMessage(content=system_prompt))
            messages.append(HumanMessage(content=prompt))

            span.set_attribute("llm.prompt_length", len(prompt))

            llm = self.llm
            if json_mode and self.provider == "openai":
                llm = llm.bind(response_format={"type": "json_object"})

            response = await llm.ainvoke(messages)
            content = response.content
            if not isinstance(content, str):
                # Anthropic may return content blocks
                content = "".join(
                    block.get("text", "") if isinstance(block, dict) else str(block)
                    for block in content
                )

            # Extract token usage if available
            tokens_prompt = 0
            tokens_completion = 0
            if hasattr(response, 'response_metadata'):
                usage = response.response_metadata.get('token_usage', {})
                tokens_prompt = usage.get('prompt_tokens', 0)
                tokens_completion = usage.get('completion_tokens', 0)

            tokens_total = tokens_prompt + tokens_completion
            trace_llm_call(
                model=self.model,
                prompt_tokens=tokens_prompt,
                completion_tokens=tokens_completion,
                total_tokens=tokens_total,
            )

            span.set_attribute("llm.response_length", len(content))

            return LLMResponse(
                content=content,
                model=self.model,
                tokens_prompt=tokens_prompt,
                tokens_completion=tokens_completion,
                tokens_total=tokens_total,
                raw_response=response,
            )

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        agent_name: str = "LLMClient",
    ) -> Dict[str, Any]:
        """
        Generate a JSON response from the LLM.
        Parses the response and returns a dictionary.

        Raises:
            json.JSONDecodeError: If the reply is not JSON
            ValueError: If the reply is JSON but not an object
        """
        response = await self.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            agent_name=agent_name,
            json_mode=True,
        )

        content = strip_code_fences(response.content)
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return data


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code block if present."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()

