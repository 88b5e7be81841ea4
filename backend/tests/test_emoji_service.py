"""
Prompt construction and the OpenAI-backed converter (SDK client mocked).
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from mojimajic.core.config import Settings
from mojimajic.core.constants import EmojiMode
from mojimajic.core.exceptions import ConversionError
from mojimajic.services.emoji import EmojiConverter
from mojimajic.services.prompt_builder import build_prompt


def test_pure_prompt_forbids_words():
    prompt = build_prompt("  I love pizza  ")
    system, user = prompt.messages
    assert prompt.style_id == "magic_pure"
    assert system["role"] == "system" and "ONLY emojis" in system["content"]
    assert user == {"role": "user", "content": "I love pizza"}


def test_pure_prompt_ignores_languages():
    prompt = build_prompt("hola", languages=["es-US"])
    assert "es-US" not in prompt.messages[0]["content"]


def test_mixed_prompt_keeps_filler_words_and_names_languages():
    prompt = build_prompt("we went to the beach", mode=EmojiMode.MIXED, languages=["en-US", "es-US"])
    system = prompt.messages[0]["content"]
    assert prompt.style_id == "readable_mixed"
    assert "'the'" in system and "'them'" in system
    assert "The text is in en-US, es-US." in system
    assert system.endswith("maintains readability.")


def test_prompt_rejects_empty_text():
    with pytest.raises(ValueError):
        build_prompt("   ")


def test_prompt_rejects_unknown_mode():
    with pytest.raises(ValueError):
        build_prompt("hi", mode="haiku")


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_completion(" 🍕❤️ "))
    return client


@pytest.fixture
def emoji_converter(openai_client):
    return EmojiConverter(client=openai_client, settings=Settings(openai_api_key="test"))


async def test_convert_uses_style_model_and_limits(emoji_converter, openai_client):
    result = await emoji_converter.convert("I love pizza")
    assert result == "🍕❤️"
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.7
    assert kwargs["max_tokens"] == 150
    assert kwargs["messages"][1]["content"] == "I love pizza"


async def test_convert_mixed_uses_mixed_model(emoji_converter, openai_client):
    await emoji_converter.convert("I love pizza", mode="mixed")
    assert openai_client.chat.completions.create.call_args.kwargs["model"] == "gpt-4"


async def test_convert_api_error_raises_conversion_error(emoji_converter, openai_client):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    openai_client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
    with pytest.raises(ConversionError):
        await emoji_converter.convert("hello")


async def test_convert_empty_answer_raises_conversion_error(emoji_converter, openai_client):
    openai_client.chat.completions.create.return_value = _completion("")
    with pytest.raises(ConversionError):
        await emoji_converter.convert("hello")
