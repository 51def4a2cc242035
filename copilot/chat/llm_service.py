"""
LLM service with OpenAI integration, automatic tool invocation and model fallback.

Handles:
- Chat completions over a session transcript
- Function calling: tool calls are executed and fed back until the model answers
- Model fallback on rate limiting (GPT-4o -> GPT-4o-mini)
- Token budgeting and cost logging
"""
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from openai import AsyncOpenAI, RateLimitError

from copilot.config import Settings, get_model_cost
from copilot.models import ChatMessage, Transcript
from copilot.chat.token_counter import fit_to_budget
from copilot.chat.tools import ShopTools, get_tool_definitions

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """Chat-completion boundary that runs tool calls automatically.

    Args:
        client: OpenAI async client
        model: Primary model
        fallback_model: Model tried when the primary is rate limited
        temperature: Sampling temperature
        max_output_tokens: Completion token limit per request
        max_tool_rounds: Rounds of tool execution allowed per query
        max_prompt_tokens: Prompt token budget per request
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o",
        fallback_model: Optional[str] = None,
        temperature: float = 0.3,
        max_output_tokens: int = 1000,
        max_tool_rounds: int = 5,
        max_prompt_tokens: int = 120000
    ):
        self.client = client
        self.model = model
        self.fallback_model = fallback_model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.max_tool_rounds = max_tool_rounds
        self.max_prompt_tokens = max_prompt_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatCompletionClient":
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            organization=settings.openai_org_id,
            base_url=settings.openai_base_url
        )
        return cls(
            client,
            model=settings.llm_model,
            fallback_model=settings.fallback_model,
            temperature=settings.default_temperature,
            max_output_tokens=settings.default_max_output_tokens,
            max_tool_rounds=settings.max_tool_rounds,
            max_prompt_tokens=settings.max_tokens_per_request
        )

    async def complete(self, transcript: Transcript, tools: ShopTools) -> str:
        """Get the assistant's answer for the transcript.

        Tool-call proposals and tool results are appended to the transcript
        as they happen. The final answer is returned, not appended.

        Args:
            transcript: Session transcript ending with the user's message
            tools: Tools the model may call

        Returns:
            Final assistant text (may be empty)

        Raises:
            Any error from the OpenAI client or a malformed response
        """
        tool_definitions = get_tool_definitions()
        usage = {"input_tokens": 0, "output_tokens": 0}
        rounds = 0

        message, model = await self._create(transcript.messages, tool_definitions, usage)

        while message.tool_calls:
            if rounds >= self.max_tool_rounds:
                logger.warning(
                    f"Tool round limit ({self.max_tool_rounds}) reached for session "
                    f"{transcript.session_id}, requesting final answer"
                )
                message, model = await self._create(
                    transcript.messages, tool_definitions, usage, tool_choice="none"
                )
                break

            transcript.append(ChatMessage(
                role="assistant",
                content=message.content,
                tool_calls=[
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.function.name,
                            "arguments": tc.function.arguments
                        }
                    }
                    for tc in message.tool_calls
                ]
            ))

            for tool_call in message.tool_calls:
                result = await self._run_tool(tools, tool_call)
                transcript.append(ChatMessage(
                    role="tool",
                    tool_call_id=tool_call.id,
                    content=result
                ))

            rounds += 1
            message, model = await self._create(transcript.messages, tool_definitions, usage)

        cost = get_model_cost(model, usage["input_tokens"], usage["output_tokens"])
        logger.info(
            f"Completion for session {transcript.session_id}: model={model} "
            f"tool_rounds={rounds} input_tokens={usage['input_tokens']} "
            f"output_tokens={usage['output_tokens']} cost_usd={cost:.5f}"
        )

        return message.content or ""

    async def _create(
        self,
        messages: List[ChatMessage],
        tools: List[Dict[str, Any]],
        usage: Dict[str, int],
        tool_choice: str = "auto"
    ) -> Tuple[Any, str]:
        """Send one completion request, falling back on rate limiting.

        Returns:
            The response message and the model that produced it
        """
        payload = [m.to_openai() for m in fit_to_budget(messages, self.max_prompt_tokens, self.model)]

        models = [self.model]
        if self.fallback_model and self.fallback_model != self.model:
            models.append(self.fallback_model)

        for index, model in enumerate(models):
            try:
                response = await self.client.chat.completions.create(
                    model=model,
                    messages=payload,
                    tools=tools,
                    tool_choice=tool_choice,
                    temperature=self.temperature,
                    max_tokens=self.max_output_tokens
                )
            except RateLimitError:
                if index == len(models) - 1:
                    raise
                logger.warning(f"Rate limited on {model}, falling back to {models[index + 1]}")
                continue

            if response.usage:
                usage["input_tokens"] += response.usage.prompt_tokens
                usage["output_tokens"] += response.usage.completion_tokens

            return response.choices[0].message, model

    async def _run_tool(self, tools: ShopTools, tool_call: Any) -> str:
        tool_name = tool_call.function.name
        try:
            arguments = json.loads(tool_call.function.arguments or "{}")
        except json.JSONDecodeError:
            logger.warning(f"Model sent malformed arguments for {tool_name}")
            return f"Invalid arguments for {tool_name}."

        return await tools.execute(tool_name, arguments)
