"""Chat module for the Northern Mountains copilot.

Provides the LLM-powered shopping assistant:
- Per-session conversation transcripts
- Function calling for catalog search and basket operations
- The /api/copilot query endpoint
"""
from copilot.chat.copilot import CopilotService
from copilot.chat.endpoints import router, get_copilot_service
from copilot.chat.llm_service import ChatCompletionClient
from copilot.chat.session_cache import SessionStore
from copilot.chat.tools import ShopTools, get_tool_definitions

__all__ = [
    "router",
    "get_copilot_service",
    "CopilotService",
    "ChatCompletionClient",
    "SessionStore",
    "ShopTools",
    "get_tool_definitions",
]
