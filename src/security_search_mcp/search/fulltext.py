"""
Full-Text Search

Ranked free-text search over weighted document zones with snippet
extraction and highlighting.

Scoring
-------
Every (term, zone) pair that matches adds the zone's weight:

    title 10, summary 5, article body 2, other list fields 1

``exact`` treats the query as one phrase. ``any_word`` and ``all_words``
split on whitespace; ``all_words`` additionally requires every term to occur
somewhere in the union of all zones. Documents scoring zero are dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

from ..core.errors import InvalidInput
from .filters import DateGate, apply_gates, summarize
from .models import UNDATED, Document


SEARCH_MODES: Tuple[str, ...] = ("exact", "any_word", "all_words")

# (zone name, source fields, weight)
ZONES: Tuple[Tuple[str, Tuple[str, ...], int], ...] = (
    ("title", ("title",), 10),
    ("summary", ("summary",), 5),
    ("article_text", ("article_text_md_original",), 2),
    (
        "other_fields",
        (
            "affected_organizations",
            "products_impacted",
            "threat_actor_name",
            "ciso_summary_key_points",
            "lessons_learned",
        ),
        1,
    ),
)

# Zones tried, in order, when picking the snippet source.
SNIPPET_ZONES: Tuple[str, ...] = ("summary", "article_text", "other_fields", "title")

# Boolean connectors users type out of habit; they are not search terms.
CONNECTORS = frozenset({"AND", "OR"})

HIGHLIGHT_OPEN = "<mark>"
HIGHLIGHT_CLOSE = "</mark>"
ELLIPSIS = "..."
WINDOW_SEPARATOR = " ... "


# ---------------------------------------------------------------------
# Query terms
# ---------------------------------------------------------------------

def split_terms(query: str, search_mode: str, case_sensitive: bool = False) -> List[str]:
    """
    Turn a query into search terms according to ``search_mode``.

    Raises
    ------
    InvalidInput
        If ``search_mode`` is not one of SEARCH_MODES.
    """
    if search_mode not in SEARCH_MODES:
        raise InvalidInput(
            f"Unknown search_mode '{search_mode}'.",
            hint=f"Use one of: {', '.join(SEARCH_MODES)}.",
        )

    text = (query or "").strip()
    if not text:
        return []
    if search_mode == "exact":
        return [text]

    terms: List[str] = []
    seen = set()
    for word in text.split():
        if word in CONNECTORS:
            continue
        key = word if case_sensitive else word.lower()
        if key not in seen:
            seen.add(key)
            terms.append(word)
    return terms


class TermMatcher:
    """
    Compiled patterns for a set of terms.

    Substring mode escapes the term verbatim; whole-word mode requires the
    term not to be flanked by word characters.
    """

    def __init__(self, terms: Sequence[str], case_sensitive: bool, whole_word: bool) -> None:
        flags = 0 if case_sensitive else re.IGNORECASE
        self.terms = list(terms)
        self.patterns: List[Pattern[str]] = [
            re.compile(self._expr(t, whole_word), flags) for t in self.terms
        ]
        # Longest first so overlapping terms highlight the larger span.
        ordered = sorted(self.terms, key=len, reverse=True)
        self.combined: Pattern[str] = re.compile(
            "|".join(self._expr(t, whole_word) for t in ordered),
            flags,
        )

    @staticmethod
    def _expr(term: str, whole_word: bool) -> str:
        escaped = re.escape(term)
        if whole_word:
            return rf"(?<!\w){escaped}(?!\w)"
        return escaped


# ---------------------------------------------------------------------
# Snippets
# ---------------------------------------------------------------------

def _highlight(text: str, pattern: Pattern[str]) -> str:
    return pattern.sub(lambda m: f"{HIGHLIGHT_OPEN}{m.group(0)}{HIGHLIGHT_CLOSE}", text)


def build_snippet(
    text: str,
    pattern: Pattern[str],
    window: int = 200,
    highlight: bool = True,
) -> str:
    """
    Extract a window of ``text`` around the matches of ``pattern``.

    If the first and last matches fit in one window the snippet is centred
    on them. Otherwise two half-size windows around the first and last
    match are joined by a separator. Truncated ends get an ellipsis.
    """
    spans = [m.span() for m in pattern.finditer(text)]
    if not spans:
        return ""

    first_start, first_end = spans[0]
    last_start, last_end = spans[-1]

    if last_end - first_start <= window:
        pad = (window - (last_end - first_start)) // 2
        pieces = [(max(0, first_start - pad), min(len(text), last_end + pad))]
    else:
        pad = window // 4
        head = (max(0, first_start - pad), min(len(text), first_end + pad))
        tail = (max(0, last_start - pad), min(len(text), last_end + pad))
        if tail[0] <= head[1]:
            pieces = [(head[0], tail[1])]
        else:
            pieces = [head, tail]

    rendered = []
    for start, end in pieces:
        chunk = text[start:end]
        rendered.append(_highlight(chunk, pattern) if highlight else chunk)

    snippet = WINDOW_SEPARATOR.join(rendered)
    if pieces[0][0] > 0:
        snippet = ELLIPSIS + snippet
    if pieces[-1][1] < len(text):
        snippet = snippet + ELLIPSIS
    return snippet


# ---------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------

@dataclass
class TextMatch:
    document: Document
    relevance_score: int = 0
    match_count: int = 0
    matched_in: List[str] = field(default_factory=list)
    matched_terms: set = field(default_factory=set)
    zone_texts: Dict[str, str] = field(default_factory=dict)


def zone_texts(doc: Document) -> Dict[str, str]:
    texts: Dict[str, str] = {}
    for name, fields, _ in ZONES:
        parts = [doc.text(f) for f in fields]
        texts[name] = " ".join(p for p in parts if p)
    return texts


def score_document(doc: Document, matcher: TermMatcher) -> TextMatch:
    result = TextMatch(document=doc, zone_texts=zone_texts(doc))

    for name, _, weight in ZONES:
        text = result.zone_texts[name]
        if not text:
            continue

        zone_hit = False
        for index, pattern in enumerate(matcher.patterns):
            hits = len(pattern.findall(text))
            if not hits:
                continue
            zone_hit = True
            result.relevance_score += weight
            result.match_count += hits
            result.matched_terms.add(index)

        if zone_hit:
            result.matched_in.append(name)

    return result


def passes_term_gate(match: TextMatch, search_mode: str, term_count: int) -> bool:
    if search_mode == "all_words":
        return len(match.matched_terms) == term_count
    return bool(match.matched_terms)


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def search_text(
    documents: Sequence[Document],
    query: str,
    search_mode: str = "exact",
    filters: Optional[Mapping[str, Sequence[str]]] = None,
    since_date: Optional[str] = None,
    case_sensitive: bool = False,
    whole_word: bool = False,
    limit: int = 30,
    highlight: bool = True,
    date_gate: DateGate = DateGate(),
    snippet_window: int = 200,
) -> Dict[str, Any]:
    """
    Rank documents by weighted term matches.

    ``filters`` must already be normalized and ``since_date`` validated;
    the same gates as structured queries run before text matching.
    """
    filters = filters or {}
    terms = split_terms(query, search_mode, case_sensitive)

    response: Dict[str, Any] = {
        "total_results": 0,
        "query": query,
        "search_mode": search_mode,
        "filters": dict(filters),
        "since_date": since_date,
        "case_sensitive": case_sensitive,
        "whole_word": whole_word,
        "results": [],
    }
    if not terms:
        return response

    matcher = TermMatcher(terms, case_sensitive, whole_word)
    candidates = apply_gates(documents, filters, since_date, date_gate)

    matches: List[TextMatch] = []
    for doc in candidates:
        match = score_document(doc, matcher)
        if not passes_term_gate(match, search_mode, len(terms)):
            continue
        if match.relevance_score <= 0:
            continue
        matches.append(match)

    matches.sort(
        key=lambda m: (m.relevance_score, date_gate.date_of(m.document) or UNDATED),
        reverse=True,
    )

    response["total_results"] = len(matches)
    response["results"] = [
        _format_match(m, matcher, highlight, snippet_window)
        for m in matches[:limit]
    ]
    return response


def _format_match(
    match: TextMatch,
    matcher: TermMatcher,
    highlight: bool,
    window: int,
) -> Dict[str, Any]:
    snippet = ""
    for zone in SNIPPET_ZONES:
        if zone in match.matched_in:
            snippet = build_snippet(
                match.zone_texts[zone],
                matcher.combined,
                window=window,
                highlight=highlight,
            )
            break

    result = summarize(match.document)
    result.update({
        "relevance_score": match.relevance_score,
        "match_count": match.match_count,
        "matched_in": list(match.matched_in),
        "snippet": snippet,
    })
    return result
