"""
Token counting for chat-completion requests.

Long-lived sessions can outgrow the model's context window. Only the
request payload is trimmed here; the stored transcript keeps everything.
"""
import json
from typing import List

import tiktoken

from copilot.models import ChatMessage

# Role and message framing tokens
MESSAGE_OVERHEAD = 4


def _get_encoding(model: str):
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        # Fallback to cl100k_base for unknown models
        return tiktoken.get_encoding("cl100k_base")


def _message_text(message: ChatMessage) -> str:
    text = message.content or ""
    if message.tool_calls:
        text += json.dumps(message.tool_calls)
    return text


def _byte_upper_bound(messages: List[ChatMessage]) -> int:
    # A BPE token covers at least one byte
    return sum(len(_message_text(m).encode("utf-8")) + MESSAGE_OVERHEAD for m in messages)


def _current_turn_start(messages: List[ChatMessage]) -> int:
    # Index of the last user message, or of the last non-tool message
    for role in ("user", None):
        for index in range(len(messages) - 1, -1, -1):
            if messages[index].role == role or (role is None and messages[index].role != "tool"):
                return index
    return 0


def fit_to_budget(
    messages: List[ChatMessage],
    max_tokens: int,
    model: str = "gpt-4o"
) -> List[ChatMessage]:
    """Keep the system prompt, the current turn and the newest earlier
    messages that fit the budget.

    The current turn (the last user message and the tool exchanges after
    it) is always kept whole, even over budget. A kept history never starts
    with a tool result whose assistant tool call was dropped.

    Args:
        messages: Transcript messages, oldest first
        max_tokens: Maximum prompt tokens to allow
        model: Model name for tokenizer

    Returns:
        Messages to send, oldest first
    """
    if not messages or _byte_upper_bound(messages) <= max_tokens:
        return list(messages)

    encoding = _get_encoding(model)

    def tokens(message: ChatMessage) -> int:
        return len(encoding.encode(_message_text(message))) + MESSAGE_OVERHEAD

    head = messages[:1] if messages[0].role == "system" else []
    rest = messages[len(head):]
    if not rest:
        return list(head)

    turn_start = _current_turn_start(rest)
    kept: List[ChatMessage] = list(rest[turn_start:])
    total = sum(tokens(m) for m in head + kept)

    for message in reversed(rest[:turn_start]):
        message_tokens = tokens(message)
        if total + message_tokens > max_tokens:
            break
        kept.insert(0, message)
        total += message_tokens

    while kept and kept[0].role == "tool":
        kept.pop(0)

    return head + kept
