"""
Conversation orchestration for the copilot endpoint.

One query: resolve the session transcript, append the user's message,
let the model answer (calling tools as it likes), record the answer.
Failures never reach the caller; they become an apology in the
transcript and the reply.
"""
import logging
from typing import Optional

import httpx

from copilot.config import Settings
from copilot.models import ChatMessage
from copilot.services import (
    BasketService,
    CatalogService,
    ProductImageUrlProvider,
    ShoppingBasket,
)
from copilot.chat.llm_service import ChatCompletionClient
from copilot.chat.prompts import APOLOGY, build_system_prompt
from copilot.chat.session_cache import SessionStore
from copilot.chat.tools import ErrorHook, ShopTools, log_error

logger = logging.getLogger(__name__)


class CopilotService:
    """Answers customer queries within per-session conversations."""

    def __init__(
        self,
        chat_client: ChatCompletionClient,
        sessions: SessionStore,
        catalog: CatalogService,
        basket: ShoppingBasket,
        images: ProductImageUrlProvider,
        on_error: Optional[ErrorHook] = None
    ):
        self.chat_client = chat_client
        self.sessions = sessions
        self.catalog = catalog
        self.basket = basket
        self.images = images
        self.on_error = on_error or log_error
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CopilotService":
        """Build the service and its backend clients from settings."""
        http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        catalog = CatalogService(settings.catalog_api_url, client=http_client)
        basket_service = BasketService(settings.basket_api_url, client=http_client)

        service = cls(
            chat_client=ChatCompletionClient.from_settings(settings),
            sessions=SessionStore(
                maxsize=settings.session_cache_maxsize,
                ttl=settings.session_cache_ttl,
                system_prompt=build_system_prompt(settings.append_question_tags)
            ),
            catalog=catalog,
            basket=ShoppingBasket(basket_service, catalog),
            images=ProductImageUrlProvider(settings.product_image_base_url or settings.catalog_api_url)
        )
        service._http_client = http_client
        return service

    def tools_for(self, access_token: Optional[str]) -> ShopTools:
        """Tools acting on behalf of the caller holding ``access_token``."""
        return ShopTools(
            self.catalog,
            self.basket,
            self.images,
            access_token=access_token,
            on_error=self.on_error
        )

    async def query(
        self,
        q: str,
        session_id: str,
        access_token: Optional[str] = None
    ) -> str:
        """Answer one user message in the given session.

        Args:
            q: User's message text
            session_id: Caller-supplied session identifier
            access_token: Caller's bearer token, forwarded to the basket

        Returns:
            Assistant reply, the apology on failure, or "" if the model
            returned no text
        """
        async with self.sessions.lock(session_id):
            transcript = self.sessions.get_or_create(session_id)
            self.sessions.append(session_id, ChatMessage(role="user", content=q))

            try:
                reply = await self.chat_client.complete(transcript, self.tools_for(access_token))
            except Exception as e:
                self.on_error(f"Error getting chat completions for session {session_id}.", e)
                self.sessions.append(session_id, ChatMessage(role="assistant", content=APOLOGY))
                return APOLOGY

            if not reply.strip():
                logger.warning(f"Empty completion for session {session_id}")
                return ""

            self.sessions.append(session_id, ChatMessage(role="assistant", content=reply))
            return reply

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
