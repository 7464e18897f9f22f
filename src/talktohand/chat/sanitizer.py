"""Removal of model control tags from assistant text.

Some models wrap internal reasoning in a channel span such as
``<|channel|>analysis<|message|>`` and sprinkle role markers like
``<|start|>`` or ``<|end|>`` through their output. None of that is meant
for display.
"""

import re

# <|channel|> ... <|message|> with no marker opener in between
CHANNEL_SPAN = re.compile(r"<\|channel\|>(?:(?!<\|).)*?<\|message\|>", re.DOTALL)

# Any <|...|> whose body holds no nested delimiter
CONTROL_MARKER = re.compile(r"<\|(?:(?!<\||\|>).)*\|>", re.DOTALL)


def _strip_tags(text: str) -> str:
    text = CHANNEL_SPAN.sub("", text)
    return CONTROL_MARKER.sub("", text)


def clean(text: str) -> str:
    """Strip control tags and surrounding whitespace.

    Removal repeats until nothing matches, since deleting a marker can
    splice its neighbours into a new one (``<<|a|>|b|>``). That makes the
    function idempotent.
    """
    previous = None
    while text != previous:
        previous = text
        text = _strip_tags(text)
    return text.strip()
