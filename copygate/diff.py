"""
Diff spans between source copy and the gated rewrite.

Uses diff-match-patch (Google's text diff library); no LLM involved.
"""

from __future__ import annotations

import diff_match_patch as dmp_module

_dmp = dmp_module.diff_match_patch()


def compute_diff_spans(original: str, rewritten: str) -> list[dict]:
    """
    Spans with type (equal/delete/insert), text, and positions.

    orig_* offsets index the source, new_* offsets the rewrite.
    """
    diffs = _dmp.diff_main(original or "", rewritten or "")
    _dmp.diff_cleanupSemantic(diffs)

    spans = []
    orig_pos = 0
    new_pos = 0

    for op, text in diffs:
        if op == 0:  # EQUAL
            spans.append({
                "type": "equal",
                "text": text,
                "orig_start": orig_pos,
                "orig_end": orig_pos + len(text),
                "new_start": new_pos,
                "new_end": new_pos + len(text),
            })
            orig_pos += len(text)
            new_pos += len(text)
        elif op == -1:  # DELETE
            spans.append({
                "type": "delete",
                "text": text,
                "orig_start": orig_pos,
                "orig_end": orig_pos + len(text),
            })
            orig_pos += len(text)
        elif op == 1:  # INSERT
            spans.append({
                "type": "insert",
                "text": text,
                "new_start": new_pos,
                "new_end": new_pos + len(text),
            })
            new_pos += len(text)

    return spans
