"""
Version Diff Models v1.0.0
==========================
Data classes for document version-diff results.

Every result type exposes to_dict() so the renderer layer can ship it
as JSON without loss.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Optional, Any


class LineKind(Enum):
    """Kind of a rendered diff row."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    SEPARATOR = "separator"


class SpanKind(Enum):
    """Kind of a token segment inside a word-level sub-diff."""
    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


@dataclass
class WordSpan:
    """
    One token segment within a modified line's word diff.

    Attributes:
        kind: Whether the text is shared, added or removed
        text: The literal text of the segment (words and whitespace)
    """
    kind: SpanKind
    text: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'kind': self.kind.value,
            'text': self.text
        }


@dataclass
class DiffStats:
    """
    Aggregate counters for a diff.

    Attributes:
        added: Lines added beyond those paired as modifications
        removed: Lines removed beyond those paired as modifications
        modified: Removed/added line pairs treated as in-place edits
    """
    added: int = 0
    removed: int = 0
    modified: int = 0

    def __add__(self, other: 'DiffStats') -> 'DiffStats':
        if not isinstance(other, DiffStats):
            return NotImplemented
        return DiffStats(
            added=self.added + other.added,
            removed=self.removed + other.removed,
            modified=self.modified + other.modified
        )

    @property
    def is_empty(self) -> bool:
        """True when no counter is set."""
        return self.added == 0 and self.removed == 0 and self.modified == 0

    @property
    def total(self) -> int:
        """Sum of all counters."""
        return self.added + self.removed + self.modified

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            'added': self.added,
            'removed': self.removed,
            'modified': self.modified
        }


@dataclass
class DiffLine:
    """
    A single row of a unified diff.

    Unchanged rows carry both line numbers, removed rows only the old one,
    added rows only the new one. Separator rows stand in for a collapsed
    run of unchanged lines and carry neither line numbers nor word spans.

    Attributes:
        kind: Row kind
        content: Line text (for separators, a human-readable summary)
        old_line_no: 1-based line number in the old text
        new_line_no: 1-based line number in the new text
        word_spans: Word-level diff, only on rows that are part of a
                    modified pair
        hidden_line_count: Number of lines a separator replaces
    """
    kind: LineKind
    content: str
    old_line_no: Optional[int] = None
    new_line_no: Optional[int] = None
    word_spans: Optional[List[WordSpan]] = None
    hidden_line_count: Optional[int] = None

    @property
    def is_change(self) -> bool:
        """Whether this row is an addition or removal."""
        return self.kind in (LineKind.ADDED, LineKind.REMOVED)

    @classmethod
    def separator(cls, hidden_line_count: int) -> 'DiffLine':
        """Build a separator row standing in for hidden unchanged lines."""
        noun = 'line' if hidden_line_count == 1 else 'lines'
        return cls(
            kind=LineKind.SEPARATOR,
            content=f"… {hidden_line_count} unchanged {noun} …",
            hidden_line_count=hidden_line_count
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: Dict[str, Any] = {
            'kind': self.kind.value,
            'content': self.content
        }
        if self.old_line_no is not None:
            data['old_line_no'] = self.old_line_no
        if self.new_line_no is not None:
            data['new_line_no'] = self.new_line_no
        if self.word_spans is not None:
            data['word_spans'] = [s.to_dict() for s in self.word_spans]
        if self.hidden_line_count is not None:
            data['hidden_line_count'] = self.hidden_line_count
        return data


@dataclass
class FieldDiffResult:
    """
    Diff of a single document field.

    Attributes:
        field: Field key (e.g. 'content')
        label: Display label (e.g. 'Content')
        has_changes: False exactly when the two texts align with no edits
        unified_lines: Rows of the unified diff, context already collapsed
        stats: Added/removed/modified counters for this field
    """
    field: str
    label: str
    has_changes: bool = False
    unified_lines: List[DiffLine] = field(default_factory=list)
    stats: DiffStats = field(default_factory=DiffStats)

    @classmethod
    def unchanged(cls, field_name: str, label: str) -> 'FieldDiffResult':
        """Result for a field whose two versions are identical."""
        return cls(field=field_name, label=label)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'field': self.field,
            'label': self.label,
            'has_changes': self.has_changes,
            'unified_lines': [line.to_dict() for line in self.unified_lines],
            'stats': self.stats.to_dict()
        }


@dataclass
class DocumentDiffResult:
    """
    Diff of an entire snapshot pair.

    Attributes:
        fields: Changed fields only, 'content' first when present
        total_stats: Element-wise sum of every field's stats
    """
    fields: List[FieldDiffResult] = field(default_factory=list)
    total_stats: DiffStats = field(default_factory=DiffStats)

    @property
    def has_changes(self) -> bool:
        """Whether any tracked field changed."""
        return bool(self.fields)

    def get_field(self, name: str) -> Optional[FieldDiffResult]:
        """Look up a changed field by key."""
        for result in self.fields:
            if result.field == name:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'fields': [f.to_dict() for f in self.fields],
            'total_stats': self.total_stats.to_dict()
        }

    def to_json(self, **kwargs) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict(), **kwargs)
