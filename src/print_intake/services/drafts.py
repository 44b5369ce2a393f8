"""Notification email drafts for stored submissions."""

import logging
from dataclasses import dataclass
from typing import Protocol

from print_intake.errors import DraftGenerationError

logger = logging.getLogger(__name__)

DRAFT_PROMPT_TEMPLATE = (
    'You are a friendly assistant for "{studio}", a professional event '
    "photography company.\n"
    'A customer with the email "{email}" has requested a digital copy of their '
    'photo. Their photo is from folder number "{folder_number}".\n'
    "Generate a short, professional, and friendly email body for them.\n"
    "Mention that their photo is attached and thank them for choosing "
    "{studio} at the event.\n"
    "Do not include a subject line or signature, only the body of the email."
)


class DraftClient(Protocol):
    """Interface for a remote text-generation service."""

    async def complete(self, *, model: str, prompt: str) -> str:
        """Return generated text for the prompt."""


@dataclass
class DraftService:
    """Builds the draft prompt and calls the text-generation client once."""

    client: DraftClient | None
    model: str
    studio_name: str = "Photo Illusions"

    def build_prompt(self, email: str, folder_number: str) -> str:
        """Fill the fixed template with the submission fields."""
        return DRAFT_PROMPT_TEMPLATE.format(
            studio=self.studio_name, email=email, folder_number=folder_number
        )

    async def generate(self, email: str, folder_number: str) -> str:
        """Generate a draft email body, returned verbatim."""
        if self.client is None:
            raise DraftGenerationError("Draft generation is not configured.")
        prompt = self.build_prompt(email, folder_number)
        try:
            return await self.client.complete(model=self.model, prompt=prompt)
        except Exception as exc:
            logger.exception("Error generating email draft")
            raise DraftGenerationError(
                "Failed to generate email draft. "
                "Please check your API key and network connection."
            ) from exc
