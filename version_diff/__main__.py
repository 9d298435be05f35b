"""
Command-line entry point: diff two text files as one document field.

Usage:
    python -m version_diff OLD_FILE NEW_FILE [--engine dmp] [--context 3]
"""

import argparse
import json
import sys
from pathlib import Path

from config_logging import VersionDiffError

from .differ import DocumentDiffer


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Document Version Diff')
    parser.add_argument('old_file', type=Path, help='Previous version of the text')
    parser.add_argument('new_file', type=Path, help='Current version of the text')
    parser.add_argument('--field', default='content', help='Field key to report (default: content)')
    parser.add_argument('--label', default='Content', help='Field label to report')
    parser.add_argument('--engine', choices=('myers', 'dmp'), default=None,
                        help='Sequence differ to use')
    parser.add_argument('--context', type=int, default=None,
                        help='Unchanged lines kept around each change')
    parser.add_argument('--indent', type=int, default=2, help='JSON indent')
    args = parser.parse_args(argv)

    missing = [str(p) for p in (args.old_file, args.new_file) if not p.exists()]
    if missing:
        print(f"Error: file(s) not found: {', '.join(missing)}", file=sys.stderr)
        return 2

    try:
        old_text = args.old_file.read_text(encoding='utf-8')
        new_text = args.new_file.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        print(f"Error: file is not valid UTF-8 ({e.reason} at byte {e.start})", file=sys.stderr)
        return 2

    try:
        differ = DocumentDiffer(engine=args.engine)
        result = differ.diff_field(args.field, args.label, old_text, new_text,
                                   context_lines=args.context)
    except VersionDiffError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=args.indent, ensure_ascii=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
