from dataclasses import dataclass

from .constants import FILLER_WORDS, EmojiMode


@dataclass(frozen=True)
class EmojiStyle:
    """
    Describes how the translator should answer.

    Kept small and declarative: the prompt builder turns a style plus the
    user's text into chat messages, the converter picks the model from it.
    """

    id: str
    mode: EmojiMode
    instructions: str
    mentions_languages: bool = False  # append detected languages to the system prompt


PURE_EMOJI_STYLE = EmojiStyle(
    id="magic_pure",
    mode=EmojiMode.EMOJI,
    instructions=(
        "You are a magical emoji translator. Convert the given text into ONLY emojis "
        "that represent the meaning, emotions, and concepts. Use NO words, NO letters, "
        "NO text - ONLY emojis. Be creative and expressive with your emoji choices. "
        "The response should be pure emojis that tell the story or convey the message."
    ),
)

MIXED_STYLE = EmojiStyle(
    id="readable_mixed",
    mode=EmojiMode.MIXED,
    instructions=(
        "You are an emoji translator. Convert meaningful words in the given text into "
        "relevant emojis, but keep common filler words, articles, prepositions, and "
        "pronouns as text. Keep words like "
        + ", ".join(f"'{w}'" for w in FILLER_WORDS)
        + " as regular text. Only convert nouns, verbs, adjectives, and meaningful "
        "words to emojis."
    ),
    mentions_languages=True,
)

STYLES: dict[EmojiMode, EmojiStyle] = {
    EmojiMode.EMOJI: PURE_EMOJI_STYLE,
    EmojiMode.MIXED: MIXED_STYLE,
}
