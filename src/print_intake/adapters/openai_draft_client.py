"""OpenAI Responses API client for email drafts."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from print_intake.services.drafts import DraftClient


@dataclass
class OpenAIDraftClient(DraftClient):
    """Draft client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIDraftClient":
        """Create an OpenAI draft client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(self, *, model: str, prompt: str) -> str:
        """Return the generated text for a prompt."""
        response = await self.client.responses.create(model=model, input=prompt)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
