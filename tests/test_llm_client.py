"""Tests for justdo/ai/llm_client.py: the Anthropic SDK client is mocked."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from justdo.ai.llm_client import LLMClient, extract_json_object


def make_sdk(text=None):
    sdk = MagicMock()
    content = [SimpleNamespace(text=text)] if text is not None else []
    sdk.messages.create = AsyncMock(return_value=SimpleNamespace(content=content))
    return sdk


@pytest.mark.asyncio
async def test_complete_returns_first_text_block():
    sdk = make_sdk('{"ok": true}')
    client = LLMClient(client=sdk)
    out = await client.complete(
        [{"role": "user", "content": "hi"}], system="sys", model="m", max_tokens=10
    )
    assert out == '{"ok": true}'
    kwargs = sdk.messages.create.call_args.kwargs
    assert kwargs["system"] == "sys"
    assert kwargs["model"] == "m"
    assert kwargs["max_tokens"] == 10


@pytest.mark.asyncio
async def test_complete_empty_content():
    client = LLMClient(client=make_sdk())
    assert await client.complete([], system="s", model="m") == ""


@pytest.mark.asyncio
async def test_complete_propagates_api_errors():
    sdk = MagicMock()
    sdk.messages.create = AsyncMock(
        side_effect=anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com"))
    )
    client = LLMClient(client=sdk)
    with pytest.raises(anthropic.APIError):
        await client.complete([], system="s", model="m")


@pytest.mark.asyncio
async def test_ping_false_on_api_error():
    sdk = MagicMock()
    sdk.models.list = AsyncMock(
        side_effect=anthropic.APIConnectionError(request=httpx.Request("GET", "https://api.anthropic.com"))
    )
    assert await LLMClient(client=sdk).ping() is False


def test_extract_json_object_plain():
    assert extract_json_object('  {"a": 1} ') == {"a": 1}


def test_extract_json_object_fenced():
    assert extract_json_object('```json\n{"a": [1, 2]}\n```') == {"a": [1, 2]}
    assert extract_json_object('```\n{"b": 2}\n```') == {"b": 2}


def test_extract_json_object_invalid():
    with pytest.raises(json.JSONDecodeError):
        extract_json_object("not json")
