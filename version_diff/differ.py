"""
Document Version Differ v1.0.0
==============================
Field and document orchestration for version-history diffs.

Each tracked field runs through the same pipeline: line tokenizing,
line-level alignment, block grouping with modification pairing, word
diffs for modified pairs, and finally context collapsing. Only changed
fields are returned, 'content' first.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Mapping, NamedTuple, Optional, Sequence

from config_logging import (
    get_config, get_logger, handle_errors, DiffConfig, InvalidInput
)

from .blocks import build_lines
from .collapse import collapse_context, longest_unchanged_run, validate_context
from .models import DiffStats, DocumentDiffResult, FieldDiffResult
from .sequence import get_differ
from .tokenizers import split_lines
from .words import WordDiffer

logger = get_logger('version_diff.differ')


class TrackedField(NamedTuple):
    """A snapshot key and its display label."""
    field: str
    label: str


TRACKED_FIELDS = (
    TrackedField('content', 'Content'),
    TrackedField('title', 'Title'),
    TrackedField('description', 'Description'),
    TrackedField('state_key', 'State'),
)

PRIMARY_FIELD = 'content'


def _check_text(value, parameter: str) -> str:
    """Accept str or None (read as ''), reject everything else."""
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidInput(
            f"{parameter} must be a string or None, got {type(value).__name__}",
            parameter=parameter
        )
    return value


def _check_name(value, parameter: str) -> str:
    if not isinstance(value, str):
        raise InvalidInput(
            f"{parameter} must be a string, got {type(value).__name__}",
            parameter=parameter
        )
    return value


class DocumentDiffer:
    """
    Version diff engine for multi-field documents.

    Holds configuration only, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        engine: Optional[str] = None,
        context_lines: Optional[int] = None,
        collapse_threshold: Optional[int] = None,
        max_lines: Optional[int] = None,
        max_edit_distance: Optional[int] = None,
        max_workers: Optional[int] = None,
        fields: Sequence[TrackedField] = TRACKED_FIELDS,
        config: Optional[DiffConfig] = None
    ):
        """
        Initialize the differ.

        Unset arguments fall back to the global DiffConfig.

        Args:
            engine: Sequence differ name ('myers' or 'dmp')
            context_lines: Unchanged lines kept around each change
            collapse_threshold: Longest unchanged run shown in full
            max_lines: Combined line count above which a field falls
                       back to a coarse replace
            max_edit_distance: Myers search depth limit
            max_workers: Threads used to diff fields (1 = sequential)
            fields: Tracked fields in display order
            config: Configuration to read defaults from
        """
        config = config or get_config()

        self.engine = engine if engine is not None else config.engine
        self.context_lines = context_lines if context_lines is not None else config.context_lines
        self.collapse_threshold = (collapse_threshold if collapse_threshold is not None
                                   else config.collapse_threshold)
        self.max_workers = max_workers if max_workers is not None else config.max_workers
        self.fields = tuple(fields)

        validate_context(self.context_lines, self.collapse_threshold)
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            raise InvalidInput("max_workers must be a positive integer", parameter='max_workers')

        self.line_differ = get_differ(
            self.engine,
            max_tokens=max_lines if max_lines is not None else config.max_lines,
            max_edit_distance=(max_edit_distance if max_edit_distance is not None
                               else config.max_edit_distance)
        )
        # Word tokens of a single line never approach the line cap
        self.word_differ = WordDiffer(get_differ(self.engine))

    @handle_errors(logger)
    def diff_field(
        self,
        field: str,
        label: str,
        old_text: Optional[str],
        new_text: Optional[str],
        context_lines: Optional[int] = None
    ) -> FieldDiffResult:
        """
        Diff a single text field.

        Args:
            field: Field key
            label: Display label
            old_text: Previous text; None is the version-1 baseline
            new_text: Current text; None reads as empty
            context_lines: Override of the instance context size

        Returns:
            FieldDiffResult
        """
        field = _check_name(field, 'field')
        label = _check_name(label, 'label')
        old_text = _check_text(old_text, 'old_text')
        new_text = _check_text(new_text, 'new_text')

        threshold = self.collapse_threshold
        if context_lines is None:
            context_lines = self.context_lines
        elif isinstance(context_lines, int) and not isinstance(context_lines, bool):
            # A wider context widens the threshold with it
            threshold = max(threshold, 2 * context_lines)
        validate_context(context_lines, threshold)

        if old_text == new_text:
            return FieldDiffResult.unchanged(field, label)

        old_lines = split_lines(old_text)
        new_lines = split_lines(new_text)
        logger.debug(f"Diffing field '{field}': old={len(old_lines)} lines, new={len(new_lines)} lines",
                     field=field, old_lines=len(old_lines), new_lines=len(new_lines))

        ops = self.line_differ.diff(old_lines, new_lines)
        lines, stats = build_lines(ops, self.word_differ)

        if stats.is_empty:
            # Texts differ only in line endings or a trailing newline
            return FieldDiffResult.unchanged(field, label)

        collapsed = collapse_context(lines, context_lines, threshold)
        logger.debug(f"Field '{field}' diff: +{stats.added} -{stats.removed} ~{stats.modified}",
                     field=field, added=stats.added, removed=stats.removed,
                     modified=stats.modified, rows=len(collapsed),
                     longest_unchanged_run=longest_unchanged_run(lines))

        return FieldDiffResult(
            field=field,
            label=label,
            has_changes=True,
            unified_lines=collapsed,
            stats=stats
        )

    @handle_errors(logger)
    def diff_document(
        self,
        old_snapshot: Optional[Mapping[str, Optional[str]]],
        new_snapshot: Mapping[str, Optional[str]]
    ) -> DocumentDiffResult:
        """
        Diff every tracked field of two snapshots.

        Args:
            old_snapshot: Previous field values; None for the first version
            new_snapshot: Current field values

        Returns:
            DocumentDiffResult with changed fields only
        """
        if old_snapshot is not None and not isinstance(old_snapshot, Mapping):
            raise InvalidInput(
                f"old_snapshot must be a mapping or None, got {type(old_snapshot).__name__}",
                parameter='old_snapshot'
            )
        if not isinstance(new_snapshot, Mapping):
            raise InvalidInput(
                f"new_snapshot must be a mapping, got {type(new_snapshot).__name__}",
                parameter='new_snapshot'
            )
        old_snapshot = old_snapshot or {}

        jobs = [
            (tracked,
             _check_text(old_snapshot.get(tracked.field), f"old_snapshot['{tracked.field}']"),
             _check_text(new_snapshot.get(tracked.field), f"new_snapshot['{tracked.field}']"))
            for tracked in self.fields
        ]

        with logger.log_operation('diff_document', fields=len(jobs)):
            if self.max_workers > 1 and len(jobs) > 1:
                with ThreadPoolExecutor(max_workers=min(self.max_workers, len(jobs))) as pool:
                    results = list(pool.map(
                        lambda job: self.diff_field(job[0].field, job[0].label, job[1], job[2]),
                        jobs
                    ))
            else:
                results = [
                    self.diff_field(tracked.field, tracked.label, old_text, new_text)
                    for tracked, old_text, new_text in jobs
                ]

        changed: List[FieldDiffResult] = [r for r in results if r.has_changes]
        # Stable sort keeps declaration order for everything after content
        changed.sort(key=lambda r: r.field != PRIMARY_FIELD)

        total = DiffStats()
        for result in changed:
            total = total + result.stats

        logger.debug(f"Document diff: {len(changed)} changed field(s), "
                     f"+{total.added} -{total.removed} ~{total.modified}",
                     changed_fields=len(changed))

        return DocumentDiffResult(fields=changed, total_stats=total)


_default_differ: Optional[DocumentDiffer] = None


def get_default_differ() -> DocumentDiffer:
    """Get or create the differ built from the global configuration."""
    global _default_differ
    if _default_differ is None:
        _default_differ = DocumentDiffer()
    return _default_differ


def reset_default_differ():
    """Drop the cached default differ (for testing)."""
    global _default_differ
    _default_differ = None


# Convenience functions
def diff_field(
    field: str,
    label: str,
    old_text: Optional[str],
    new_text: Optional[str],
    context_lines: Optional[int] = None
) -> FieldDiffResult:
    """Diff one field with the default differ."""
    return get_default_differ().diff_field(field, label, old_text, new_text, context_lines)


def diff_document(
    old_snapshot: Optional[Mapping[str, Optional[str]]],
    new_snapshot: Mapping[str, Optional[str]]
) -> DocumentDiffResult:
    """Diff two document snapshots with the default differ."""
    return get_default_differ().diff_document(old_snapshot, new_snapshot)
