"""
Text Analysis: Deterministic Sentence Heuristics

Small, pure text helpers shared by the gates:
  - split_sentences:   abbreviation-aware sentence segmentation
  - has_finite_verb:   lexicon check for a modal/copula/action/reporting verb
  - is_weak_lead:      vacuous or verbless opening sentence
  - lacks_subject:     dangling fragment left behind by a redaction
  - term_pattern:      whole-word, space/hyphen tolerant term matcher

Everything here is regex-based and stateless. Same input, same output.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

# Private-use placeholders, never present in real copy
_ABBR_SENTINEL = "\uE000"
_SPLIT_MARK = "\uE001"

COMMON_ABBREVIATIONS = (
    "Mr.", "Mrs.", "Ms.", "Dr.", "Prof.", "Gov.", "Sen.", "Rep.",
    "Maj.", "Col.", "Gen.", "Jr.", "Sr.", "St.",
    "Jan.", "Feb.", "Mar.", "Apr.", "Jun.", "Jul.", "Aug.", "Sep.",
    "Sept.", "Oct.", "Nov.", "Dec.",
    "a.m.", "p.m.",
    "U.S.", "No.", "vs.", "etc.", "e.g.", "i.e.",
)

_ABBR_PATTERNS = [
    (re.compile(r"\b" + re.escape(abbr)), abbr.replace(".", _ABBR_SENTINEL))
    for abbr in COMMON_ABBREVIATIONS
]

# Terminal punctuation, optional closing quotes/brackets, then whitespace
_BOUNDARY = re.compile(r"([.!?][\"'”’)\]}]*)\s+")

FINITE_VERB = re.compile(
    r"\b(?:will|would|can|could|shall|should|may|might|must|"
    r"is|are|was|were|has|have|had|"
    r"opens?|opened|launch(?:es|ed)?|orders?|ordered|"
    r"approv(?:e|es|ed)|votes?|voted|plans?|planned|aims?|aimed|"
    r"uses?|used|deploys?|deployed|"
    r"announce[sd]?|says?|said|states?|stated|confirm(?:s|ed)?|"
    r"reports?|reported)\b",
    re.IGNORECASE,
)

_VACUOUS_OPENER = re.compile(
    r"^\s*(?:the\s+plan\b|there\s+(?:is|are)\b|it\s+(?:is|was)\b)",
    re.IGNORECASE,
)

_LEADING_MODAL = re.compile(
    r"^(?:will|would|can|could|shall|should|may|might|must|"
    r"is|are|was|were|has|have|had|does|do|did|be|been)\b",
    re.IGNORECASE,
)

_ABSTRACT_NOUN_PHRASE = re.compile(
    r"^(?:(?:the|a|an|this|that)\s+)?"
    r"(?:plan|proposal|initiative|program|programme|project)s?\b",
    re.IGNORECASE,
)

# "said will ...": the redaction took the reported clause's subject
_REPORT_THEN_MODAL = re.compile(
    r"\b(?:announced|said|says|stated|reported|confirmed|claimed|added|noted)"
    r"(?:\s+that)?[\s,:]+"
    r"(?:will|would|can|could|shall|should|may|might|must|"
    r"is|are|was|were|has|have|had|does|do|did|be|been)\b",
    re.IGNORECASE,
)

_REPORTING_PHRASE = re.compile(
    r"^(?:(?:has|have|had)\s+)?"
    r"(?:announced|said|says|stated|reported|confirmed|claimed|added|noted|told\s+\w+)"
    r"(?:\s+that)?[\s,:]+",
    re.IGNORECASE,
)


def split_sentences(text) -> list[str]:
    """
    Split text into trimmed, non-empty sentences.

    Known abbreviations keep their periods; ellipsis and spaced em-dash
    are normalized first. Non-string input yields an empty list.
    """
    if not text or not isinstance(text, str):
        return []

    tmp = text
    for pattern, replacement in _ABBR_PATTERNS:
        tmp = pattern.sub(replacement, tmp)

    tmp = tmp.replace("…", "...")
    tmp = re.sub(r"\s+—\s+", " — ", tmp)
    tmp = _BOUNDARY.sub(lambda m: m.group(1) + _SPLIT_MARK, tmp)

    sentences = []
    for part in tmp.split(_SPLIT_MARK):
        part = part.replace(_ABBR_SENTINEL, ".").strip()
        if part:
            sentences.append(part)
    return sentences


def has_finite_verb(sentence: str) -> bool:
    """True when the sentence carries a verb from the finite-verb lexicon."""
    return bool(FINITE_VERB.search(sentence or ""))


def is_weak_lead(sentence: str) -> bool:
    """Empty, vacuous opener ("There is...", "It was...", "The plan..."), or verbless."""
    if not sentence or not sentence.strip():
        return True
    if _VACUOUS_OPENER.search(sentence):
        return True
    return not has_finite_verb(sentence)


def lacks_subject(fragment: str) -> bool:
    """
    A redaction left no subject when the fragment opens with a
    modal/auxiliary verb or a bare abstract noun ("the plan", "program"),
    or when a reporting verb runs straight into one ("said will").
    """
    fragment = (fragment or "").lstrip()
    return bool(
        _LEADING_MODAL.search(fragment)
        or _ABSTRACT_NOUN_PHRASE.search(fragment)
        or _REPORT_THEN_MODAL.search(fragment)
    )


def strip_reporting_phrase(fragment: str) -> str:
    """Drop a leading "announced that" / "said" style phrase."""
    return _REPORTING_PHRASE.sub("", fragment.lstrip(), count=1)


def word_count(text: str) -> int:
    return len(re.findall(r"[A-Za-z0-9][\w'’-]*", text or ""))


@lru_cache(maxsize=512)
def term_pattern(term: str) -> re.Pattern:
    """
    Whole-word, case-insensitive matcher for a flagged term.

    Internal whitespace and hyphens are interchangeable, so
    "Mega Shark" also matches "mega-shark" and "Mega  Shark".
    """
    pieces = [re.escape(p) for p in re.split(r"[\s\-]+", term.strip()) if p]
    body = r"[\s\-]+".join(pieces)
    return re.compile(r"(?<![A-Za-z0-9])" + body + r"(?![A-Za-z0-9])", re.IGNORECASE)


def contains_term(text: str, terms: Iterable[str]) -> list[str]:
    """Return the terms (in given order) that occur in text as whole words."""
    return [t for t in terms if t and t.strip() and term_pattern(t).search(text or "")]


def redact_terms(text: str, terms: Iterable[str]) -> str:
    """Remove every occurrence of the terms and tidy the leftover spacing."""
    out = text
    for term in terms:
        if term and term.strip():
            out = term_pattern(term).sub(" ", out)
    out = re.sub(r"\s+", " ", out)
    out = re.sub(r"\s+([,.;:!?])", r"\1", out)
    out = re.sub(r"^[\s,;:\-—]+", "", out)
    return out.strip()


def finish_sentence(fragment: str) -> str:
    """Capitalize the first letter and ensure terminal punctuation."""
    fragment = fragment.strip().rstrip(",;:")
    if not fragment:
        return fragment
    fragment = fragment[0].upper() + fragment[1:]
    if not re.search(r"[.!?][\"'”’)\]}]*$", fragment):
        fragment += "."
    return fragment
