"""
Search Terms

Queries are split on whitespace; a double-quoted run is a single term.
Matching is a case-insensitive substring test against title and body.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Tuple
import re


TERM_PATTERN = re.compile(r'"([^"]*)"|(\S+)')


def parse_terms(query: Optional[str]) -> List[str]:
    """
    Lowercased search terms in query order, without duplicates.

    'tax "carbon price"' -> ['tax', 'carbon price']. An unterminated quote
    leaves the quote character in an ordinary whitespace term.
    """
    terms: List[str] = []
    for quoted, bare in TERM_PATTERN.findall(query or ""):
        term = (quoted if quoted else bare).strip().lower()
        if term and term != '"' and term not in terms:
            terms.append(term)
    return terms


def matches(terms: Iterable[str], title: str, body: Optional[str] = None) -> bool:
    haystack = f"{title or ''}\n{body or ''}".lower()
    return any(term in haystack for term in terms)


def highlight_spans(text: Optional[str], terms: Iterable[str]) -> List[Tuple[int, int]]:
    """
    Sorted, non-overlapping (start, end) spans of every term hit in text.

    Overlapping or touching hits are merged into one span.
    """
    if not text:
        return []
    lowered = text.lower()
    hits = []
    for term in terms:
        if not term:
            continue
        start = lowered.find(term)
        while start != -1:
            hits.append((start, start + len(term)))
            start = lowered.find(term, start + 1)
    hits.sort()

    merged: List[Tuple[int, int]] = []
    for start, end in hits:
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged
