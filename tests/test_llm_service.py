"""
Tests for the chat-completion client's automatic tool invocation loop.

The OpenAI client is replaced by an AsyncMock returning scripted
responses shaped like the SDK's objects.
"""
import unittest
from unittest.mock import AsyncMock, MagicMock

import httpx
from openai import APIConnectionError, RateLimitError

from copilot.chat.llm_service import ChatCompletionClient
from copilot.models import ChatMessage, Transcript

from fakes import make_response, make_tool_call


def _transcript() -> Transcript:
    return Transcript(
        session_id="s1",
        messages=[
            ChatMessage(role="system", content="You are a shop assistant."),
            ChatMessage(role="assistant", content="Hi!"),
            ChatMessage(role="user", content="Do you sell tents?"),
        ]
    )


def _rate_limit_error() -> RateLimitError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return RateLimitError("rate limited", response=httpx.Response(429, request=request), body=None)


class TestChatCompletionClient(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.openai = MagicMock()
        self.create = AsyncMock()
        self.openai.chat.completions.create = self.create
        self.tools = MagicMock()
        self.tools.execute = AsyncMock(return_value='{"data": []}')

    def client(self, **kwargs) -> ChatCompletionClient:
        return ChatCompletionClient(self.openai, model="gpt-4o", **kwargs)

    async def test_plain_answer(self):
        self.create.return_value = make_response(content="Yes, we do.")
        transcript = _transcript()

        reply = await self.client().complete(transcript, self.tools)

        self.assertEqual(reply, "Yes, we do.")
        self.assertEqual(len(transcript.messages), 3)
        self.tools.execute.assert_not_awaited()

        kwargs = self.create.await_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-4o")
        self.assertEqual(kwargs["tool_choice"], "auto")
        self.assertEqual(kwargs["messages"][0], {"role": "system", "content": "You are a shop assistant."})
        self.assertEqual(kwargs["messages"][-1], {"role": "user", "content": "Do you sell tents?"})
        self.assertEqual(len(kwargs["tools"]), 3)

    async def test_tool_calls_are_executed_and_recorded(self):
        self.create.side_effect = [
            make_response(tool_calls=[make_tool_call("call_1", "search_catalog", {"product_description": "tent"})]),
            make_response(content="We have the Basecamp Tent."),
        ]
        transcript = _transcript()

        reply = await self.client().complete(transcript, self.tools)

        self.assertEqual(reply, "We have the Basecamp Tent.")
        self.tools.execute.assert_awaited_once_with("search_catalog", {"product_description": "tent"})

        proposal, result = transcript.messages[3], transcript.messages[4]
        self.assertEqual(proposal.role, "assistant")
        self.assertEqual(proposal.tool_calls[0]["id"], "call_1")
        self.assertEqual(proposal.tool_calls[0]["function"]["name"], "search_catalog")
        self.assertEqual(result.role, "tool")
        self.assertEqual(result.tool_call_id, "call_1")
        self.assertEqual(result.content, '{"data": []}')

        # Second request carries the tool exchange
        second_messages = self.create.await_args_list[1].kwargs["messages"]
        self.assertEqual(second_messages[-1]["role"], "tool")
        self.assertEqual(second_messages[-2]["tool_calls"][0]["id"], "call_1")

    async def test_several_calls_in_one_round(self):
        self.create.side_effect = [
            make_response(tool_calls=[
                make_tool_call("call_1", "add_to_cart", {"item_id": 3}),
                make_tool_call("call_2", "get_cart_contents", {}),
            ]),
            make_response(content="Done."),
        ]
        transcript = _transcript()

        await self.client().complete(transcript, self.tools)

        self.assertEqual(self.tools.execute.await_count, 2)
        self.assertEqual([m.role for m in transcript.messages[3:]], ["assistant", "tool", "tool"])

    async def test_tool_rounds_are_bounded(self):
        looping = make_response(tool_calls=[make_tool_call("call_x", "get_cart_contents", {})])
        final = make_response(content="Here is your cart.")
        self.create.side_effect = [looping] * 3 + [final]
        transcript = _transcript()

        reply = await self.client(max_tool_rounds=2).complete(transcript, self.tools)

        self.assertEqual(reply, "Here is your cart.")
        self.assertEqual(self.tools.execute.await_count, 2)
        self.assertEqual(self.create.await_count, 4)
        self.assertEqual(self.create.await_args_list[-1].kwargs["tool_choice"], "none")
        # The unexecuted third proposal is not recorded
        self.assertEqual(transcript.messages[-1].role, "tool")

    async def test_malformed_arguments(self):
        self.create.side_effect = [
            make_response(tool_calls=[make_tool_call("call_1", "add_to_cart", "{item_id: 3")]),
            make_response(content="Sorry, which item?"),
        ]
        transcript = _transcript()

        await self.client().complete(transcript, self.tools)

        self.tools.execute.assert_not_awaited()
        self.assertEqual(transcript.messages[4].content, "Invalid arguments for add_to_cart.")

    async def test_empty_answer(self):
        self.create.return_value = make_response(content=None)
        self.assertEqual(await self.client().complete(_transcript(), self.tools), "")

    async def test_rate_limit_falls_back(self):
        self.create.side_effect = [_rate_limit_error(), make_response(content="From the fallback.")]

        reply = await self.client(fallback_model="gpt-4o-mini").complete(_transcript(), self.tools)

        self.assertEqual(reply, "From the fallback.")
        self.assertEqual(self.create.await_args_list[1].kwargs["model"], "gpt-4o-mini")

    async def test_rate_limit_without_fallback_raises(self):
        self.create.side_effect = _rate_limit_error()
        with self.assertRaises(RateLimitError):
            await self.client().complete(_transcript(), self.tools)

    async def test_connection_error_propagates(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        self.create.side_effect = APIConnectionError(request=request)
        with self.assertRaises(APIConnectionError):
            await self.client(fallback_model="gpt-4o-mini").complete(_transcript(), self.tools)
        self.assertEqual(self.create.await_count, 1)


if __name__ == "__main__":
    unittest.main()
