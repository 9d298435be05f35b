"""
Document Version Diff v1.0.0
============================
Line-level alignment with word-level highlighting and context collapsing
for reviewing changes between document versions.

Features:
- Myers line alignment (duplicate lines matched by position)
- Removed/added pairing within change blocks, with word-level spans
- Long unchanged stretches collapsed into separator rows
- Per-field diffs aggregated into a document result
"""

from .differ import (
    DocumentDiffer,
    TrackedField,
    TRACKED_FIELDS,
    diff_field,
    diff_document,
)
from .models import (
    LineKind,
    SpanKind,
    WordSpan,
    DiffLine,
    DiffStats,
    FieldDiffResult,
    DocumentDiffResult,
)
from .sequence import (
    Op,
    OpTag,
    SequenceDiffer,
    MyersDiffer,
    DmpDiffer,
    get_differ,
)

__version__ = "1.0.0"
__all__ = [
    'DocumentDiffer',
    'TrackedField',
    'TRACKED_FIELDS',
    'diff_field',
    'diff_document',
    'LineKind',
    'SpanKind',
    'WordSpan',
    'DiffLine',
    'DiffStats',
    'FieldDiffResult',
    'DocumentDiffResult',
    'Op',
    'OpTag',
    'SequenceDiffer',
    'MyersDiffer',
    'DmpDiffer',
    'get_differ',
]
