"""Client for the AI edit generator."""
from typing import Dict, List, Optional, Protocol

import httpx
from pydantic import ValidationError

from app.config import settings
from app.schemas.app_state import Message
from app.schemas.edits import EditProposal
from app.utils.exceptions import EditGenerationError, service_unavailable_error
from app.utils.logger import logger


class EditGenerator(Protocol):
    """Anything that turns a conversation and the current files into an edit proposal."""

    async def propose_edit(
        self,
        messages: List[Message],
        files: Optional[Dict[str, str]],
    ) -> EditProposal:
        ...


class HttpEditGenerator:
    """Forwards the conversation to the generation service over HTTP."""

    def __init__(
        self,
        url: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def propose_edit(
        self,
        messages: List[Message],
        files: Optional[Dict[str, str]],
    ) -> EditProposal:
        payload = {
            "messages": [message.model_dump(mode="json", exclude_none=True) for message in messages],
            "files": files,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Edit generator request failed: {e}", exc_info=True)
            raise EditGenerationError(f"Edit generator unreachable: {e}")

        if response.status_code != 200:
            logger.error(f"Edit generator returned {response.status_code}: {response.text[:500]}")
            raise EditGenerationError(f"Edit generator returned HTTP {response.status_code}")

        try:
            return EditProposal.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Edit generator returned an invalid proposal: {e}")
            raise EditGenerationError("Edit generator returned an invalid proposal")


def get_edit_generator() -> EditGenerator:
    """Dependency for getting the configured edit generator."""
    if not settings.edit_generator_url:
        raise service_unavailable_error("AI edit generator is not configured")
    return HttpEditGenerator(settings.edit_generator_url, settings.edit_generator_timeout_seconds)
