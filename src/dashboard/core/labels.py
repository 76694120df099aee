"""Label grammar decoder: `{...}` fragment → label mapping."""

from __future__ import annotations

import re

# key="value" with a word-character key and a quote-free value
_LABEL_PAIR = re.compile(r'(\w+)="([^"]*)"')


def parse_labels(fragment: str) -> dict[str, str]:
    """Decode the contents of a label set into a flat mapping.

    Pairs may be separated by commas and/or whitespace. Anything that does
    not match the grammar is ignored, so malformed or empty fragments give
    an empty mapping. The last occurrence of a duplicate key wins.

    Example:
        >>> parse_labels('project="group/app",ref="main"')
        {'project': 'group/app', 'ref': 'main'}
    """
    return {key: value for key, value in _LABEL_PAIR.findall(fragment)}
