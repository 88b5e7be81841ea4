from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..core.constants import EmojiMode
from ..core.styles import STYLES, EmojiStyle

MIXED_OUTPUT_RULE = "The output should be a mix of text and emojis that maintains readability."


@dataclass
class BuiltPrompt:
    style_id: str
    messages: List[Dict[str, str]]


def _system_prompt(style: EmojiStyle, languages: Sequence[str]) -> str:
    """
    Style instructions plus, for the mixed style, the detected languages.

    Pure emoji output is language independent so the hint is dropped there.
    """
    parts = [style.instructions]
    if style.mentions_languages:
        langs = [code for code in languages if code]
        if langs:
            parts.append(f"The text is in {', '.join(langs)}.")
        parts.append(MIXED_OUTPUT_RULE)
    return " ".join(parts)


def build_prompt(
    text: str,
    mode: EmojiMode = EmojiMode.EMOJI,
    languages: Sequence[str] | None = None,
) -> BuiltPrompt:
    """
    Build the chat messages for one conversion request.

    The user's text goes through untouched apart from trimming.
    """
    style = STYLES[EmojiMode(mode)]  # ValueError for unknown modes

    cleaned = text.strip()
    if not cleaned:
        raise ValueError("Cannot build a prompt for empty text")

    messages = [
        {"role": "system", "content": _system_prompt(style, languages or ())},
        {"role": "user", "content": cleaned},
    ]
    return BuiltPrompt(style_id=style.id, messages=messages)
