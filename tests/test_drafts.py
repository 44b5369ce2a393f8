"""Tests for draft generation."""

import asyncio

import pytest

from print_intake.errors import DraftGenerationError
from print_intake.services.drafts import DraftService
from tests.conftest import FakeDraftClient


def test_prompt_names_studio_and_submission_fields() -> None:
    service = DraftService(client=FakeDraftClient(), model="gpt-5.2")

    prompt = service.build_prompt("j@d.com", "B2")

    assert '"Photo Illusions"' in prompt
    assert 'email "j@d.com"' in prompt
    assert 'folder number "B2"' in prompt
    assert "Do not include a subject line" in prompt


def test_generate_returns_text_verbatim() -> None:
    client = FakeDraftClient(text="  Hello!\n\nYour photo is attached.  ")
    service = DraftService(client=client, model="gpt-5.2")

    body = asyncio.run(service.generate("j@d.com", "B2"))

    assert body == "  Hello!\n\nYour photo is attached.  "
    assert len(client.prompts) == 1


def test_generate_without_client_fails() -> None:
    service = DraftService(client=None, model="gpt-5.2")

    with pytest.raises(DraftGenerationError, match="not configured"):
        asyncio.run(service.generate("j@d.com", "B2"))


def test_generate_wraps_client_errors() -> None:
    cause = RuntimeError("401 invalid api key")
    service = DraftService(client=FakeDraftClient(error=cause), model="gpt-5.2")

    with pytest.raises(DraftGenerationError) as excinfo:
        asyncio.run(service.generate("j@d.com", "B2"))

    assert "check your API key" in str(excinfo.value)
    assert excinfo.value.__cause__ is cause
