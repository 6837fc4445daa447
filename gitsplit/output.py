"""
Output module for gitsplit.

Provides consistent output formatting across all commands:
- JSONL (default): Newline-delimited JSON for piping
- Pretty: Human-readable tables using Rich

Usage:
    from gitsplit.output import emit

    emit(report.details, pretty=pretty)
"""

import json
import sys
from typing import Iterable, Any, Dict, Optional, List

from rich.console import Console
from rich.table import Table

DEFAULT_COLUMNS = ['reference', 'prefixes', 'status', 'target_id', 'targets']

# Object ids do not fit a terminal table next to the rest
DETAIL_COLUMNS = ['reference', 'prefixes', 'status', 'targets']


def emit(
    items: Iterable[Any],
    pretty: bool = False,
    columns: Optional[List[str]] = None,
    err: bool = False
) -> None:
    """
    Emit items as JSONL or pretty table.

    Args:
        items: Items to emit (should have to_dict() method or be dicts)
        pretty: If True, render as table. If False, output JSONL
        columns: Column names for table (auto-detected if None)
        err: If True, output to stderr instead of stdout
    """
    stream = sys.stderr if err else sys.stdout

    if pretty:
        _emit_table(items, columns, stream)
    else:
        _emit_jsonl(items, stream)


def _to_dict(item: Any) -> Dict[str, Any]:
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    if isinstance(item, dict):
        return item
    return {'value': str(item)}


def _emit_jsonl(items: Iterable[Any], stream=sys.stdout) -> None:
    """Emit items as JSONL."""
    for item in items:
        print(json.dumps(_to_dict(item), ensure_ascii=False), file=stream, flush=True)


def _emit_table(items: Iterable[Any], columns: Optional[List[str]] = None, stream=sys.stdout) -> None:
    """Emit items as a Rich table."""
    rows = [_to_dict(item) for item in items]
    console = Console(file=stream)

    if not rows:
        console.print("No references to split")
        return

    if not columns:
        columns = _auto_columns(rows)

    table = Table(show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)

    for row in rows:
        values = [_format_value(row.get(col, '')) for col in columns]
        table.add_row(*values)

    console.print(table)


def _auto_columns(rows: List[Dict]) -> List[str]:
    """Auto-detect columns from rows."""
    all_keys = set(rows[0].keys())
    columns = [col for col in DEFAULT_COLUMNS if col in all_keys]
    for key in sorted(all_keys):
        if key not in columns:
            columns.append(key)
    return columns


def _format_value(value: Any, max_len: int = 50) -> str:
    """Format a value for table display."""
    if value is None:
        return ''
    if isinstance(value, list):
        s = ', '.join(str(v) for v in value[:3])
        if len(value) > 3:
            s += f' (+{len(value) - 3} more)'
        return s

    s = str(value)
    if len(s) > max_len:
        return s[:max_len-3] + '...'
    return s


def emit_summary(summary: Dict[str, Any], pretty: bool = False) -> None:
    """
    Emit the summary of a pass.

    JSON line on stdout, or a metric table on stderr with --pretty so piping
    the detail table stays clean.
    """
    if not pretty:
        print(json.dumps(summary, ensure_ascii=False), flush=True)
        return

    console = Console(file=sys.stderr)
    table = Table(title="Split Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key in ('total', 'split', 'cached', 'failed'):
        if key in summary:
            table.add_row(key.capitalize(), str(summary[key]))
    console.print(table)
