import functools
import logging
import re
from dataclasses import dataclass
from typing import TypeAlias

logger = logging.getLogger(__name__)

Token: TypeAlias = str

# Decomposed Bengali nukta letters and their precomposed forms.
NUKTA_FORMS = {
    "\u09a1\u09bc": "\u09dc",
    "\u09a2\u09bc": "\u09dd",
    "\u09af\u09bc": "\u09df",
}


@dataclass(frozen=True)
class Tokenizer:
    pattern: str | None = None
    normalize_nukta: bool = False

    def tokenize(self, text: str) -> list[Token]:
        if self.normalize_nukta:
            text = normalize_nukta(text)

        if self.pattern is None:
            pieces = text.split()
        else:
            pieces = _compile(self.pattern).findall(text)

        result: list[Token] = []
        for piece in pieces:
            if token := piece.strip().casefold():
                result.append(token)

        return result


@functools.cache
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


WHITESPACE = Tokenizer()
WORDS = Tokenizer(r"\w+")
BENGALI = Tokenizer(r"[\u0980-\u09FF]+", normalize_nukta=True)

TOKENIZERS = {
    "whitespace": WHITESPACE,
    "words": WORDS,
    "bengali": BENGALI,
}
DEFAULT_TOKENIZER = WHITESPACE


def get_tokenizer(name: str) -> Tokenizer:
    try:
        return TOKENIZERS[name]
    except KeyError:
        raise ValueError(f"unknown tokenizer: {name!r}") from None


def tokenize(text: str, tokenizer: Tokenizer = DEFAULT_TOKENIZER) -> list[Token]:
    return tokenizer.tokenize(text)


def normalize_nukta(text: str) -> str:
    for decomposed, composed in NUKTA_FORMS.items():
        text = text.replace(decomposed, composed)

    return text


def decode_chunk(data: bytes) -> str:
    "Decode UTF-8 leniently, dropping any byte sequence that does not decode."
    text = data.decode("utf-8", errors="ignore")
    if logger.isEnabledFor(logging.DEBUG) and len(text.encode("utf-8")) != len(data):
        logger.debug("dropped undecodable bytes from a %d-byte chunk", len(data))

    return text
