"""
Option extraction from free-form model replies.

The model is instructed to end each reply with a single directive of the
form ``Options: A, B, C``. That line is the only contract between the
model's prose and the option buttons, so it is parsed exactly and never
revalidated against known options.
"""

import re

OPTIONS_DIRECTIVE = re.compile(r"Options:\s*([^\n\r]+)", re.IGNORECASE)
_TRAILING_PUNCTUATION = re.compile(r"[,.]$")


def extract_options(reply: str) -> list[str]:
    """Return the labels of the first ``Options:`` directive in a reply.

    Labels are split on commas, trimmed, and lose one trailing period or
    comma. Replies without a directive yield an empty list.

    Examples:
        >>> extract_options("All set! Options: Track, Modify, Back to Order Selection.")
        ['Track', 'Modify', 'Back to Order Selection']
    """
    match = OPTIONS_DIRECTIVE.search(reply)
    if not match:
        return []
    labels = [_TRAILING_PUNCTUATION.sub("", part.strip()) for part in match.group(1).split(",")]
    return [label for label in labels if label]
