import re
from typing import Iterator

# Optional http(s) scheme, a dotted domain ending in an alphabetic TLD, an
# optional port and an optional path/query/fragment. Trailing sentence
# punctuation is left out of the match.
URL_PATTERN = re.compile(
    r"(?<![@\w.-])"
    r"(?:https?://)?"
    r"(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,}"
    r"(?::\d{1,5})?"
    r"(?:[/?#](?:[^\s<>\"']*[^\s<>\"'.,;:!?)\]}])?)?"
    r"(?![\w-])",
    re.IGNORECASE | re.MULTILINE,
)


def extract_urls(text: str) -> Iterator[str]:
    """Yield URL-like substrings of ``text`` from left to right, repeats included."""
    for match in URL_PATTERN.finditer(text):
        yield match.group(0)
