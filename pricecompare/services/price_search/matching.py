"""Token containment matching between product titles and search queries."""

from __future__ import annotations

import re
from typing import List, Optional


def normalize_query_text(value: Optional[str]) -> str:
    """Lowercase and collapse every non alphanumeric run into one space."""

    return re.sub(r"[^a-z0-9]+", " ", (value or "").lower()).strip()


def tokenize(value: Optional[str]) -> List[str]:
    return [token for token in normalize_query_text(value).split() if token]


def title_matches_query(title: Optional[str], query: Optional[str]) -> bool:
    """Return True when every query token appears in the title.

    This is a containment test, not a similarity score: order and duplicates
    are ignored and an empty side never matches.
    """

    title_tokens = set(tokenize(title))
    query_tokens = tokenize(query)
    if not query_tokens or not title_tokens:
        return False
    return all(token in title_tokens for token in query_tokens)
