"""Plain-text renderers for controller responses.

Data output is deliberately plain so that it can be piped and compared
byte-for-byte; styling is reserved for warnings and errors.
"""
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .api.models import Pod

MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
TAB_WIDTH = 8
TAB_PADDING = 1
CONFIG_SPACING = 6
LABEL_SPACING = 5


def format_value(value: object) -> str:
    """Render a JSON value the way the controller's own tooling prints it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def limit_count(returned: int, total: int) -> str:
    """Return the header suffix noting a truncated listing."""
    if returned == total:
        return "\n"
    return f" ({returned} of {total})\n"


def pretty_tabs(values: Mapping[str, object], spaces: int) -> str:
    """Render *values* as sorted ``KEY<padding>value`` lines.

    Keys are padded to the length of the longest key plus *spaces*.
    """
    if not values:
        return ""
    width = max(len(key) for key in values) + spaces
    lines = [
        f"{key}{' ' * (width - len(key))}{format_value(values[key])}\n"
        for key in sorted(values)
    ]
    return "".join(lines)


def format_config(values: Mapping[str, object]) -> str:
    """Render config values as ``KEY=value`` lines sorted by key."""
    return "".join(f"{key}={format_value(values[key])}\n" for key in sorted(values))


def format_config_oneline(values: Mapping[str, object]) -> str:
    """Render config values on a single space separated line."""
    pairs = [f"{key}={format_value(values[key])}" for key in sorted(values)]
    return " ".join(pairs) + "\n"


def tabulate(rows: Sequence[Sequence[str]]) -> str:
    """Align tab separated cells to elastic tab stops.

    Every cell but the last in a row is padded with tab characters so the
    next column starts on a common multiple of the tab width.
    """
    widths: list[int] = []
    for row in rows:
        for index, cell in enumerate(row[:-1]):
            needed = len(cell) + TAB_PADDING
            if index == len(widths):
                widths.append(needed)
            elif needed > widths[index]:
                widths[index] = needed
    stops = [-(-width // TAB_WIDTH) * TAB_WIDTH for width in widths]

    lines: list[str] = []
    for row in rows:
        parts: list[str] = []
        for index, cell in enumerate(row[:-1]):
            gap = stops[index] - len(cell)
            parts.append(cell + "\t" * -(-gap // TAB_WIDTH))
        if row:
            parts.append(row[-1])
        lines.append("".join(parts) + "\n")
    return "".join(lines)


def parse_timestamp(value: str) -> datetime:
    """Parse controller timestamps such as ``2016-01-02T15:04:05UTC``."""
    text = value.strip()
    if text.endswith("UTC"):
        text = text[:-3] + "+00:00"
    elif text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def short_date(moment: datetime) -> str:
    """Render *moment* as ``2 Jan 2006``."""
    return f"{moment.day} {MONTHS[moment.month - 1]} {moment.year}"


def _plural(count: int, unit: str) -> str:
    return f" {count} {unit}" + ("s" if count > 1 else "")


def format_expiry(expires: datetime, now: datetime | None = None) -> str:
    """Render a certificate expiry with a coarse relative hint.

    The hint uses the first non-zero calendar delta: years, then months, then
    days, compared field by field rather than as an elapsed duration.
    """
    now = now or datetime.now(UTC)
    text = short_date(expires)
    if expires < now:
        return text + " (expired)"
    years = expires.year - now.year
    months = expires.month - now.month
    days = expires.day - now.day
    text += " (in"
    if years > 0:
        text += _plural(years, "year")
    elif months > 0:
        text += _plural(months, "month")
    elif days != 0:
        text += _plural(abs(days), "day")
    return text + ")"


def short_fingerprint(fingerprint: str) -> str:
    """Abbreviate a certificate fingerprint to its first and last five characters."""
    return f"{fingerprint[:5]}[...]{fingerprint[-5:]}"


def group_processes(pods: Iterable[Pod]) -> dict[str, list[Pod]]:
    """Group pods by process type; types and pods are sorted by name."""
    grouped: dict[str, list[Pod]] = {}
    for pod in pods:
        grouped.setdefault(pod.type, []).append(pod)
    return {
        proc_type: sorted(grouped[proc_type], key=lambda pod: pod.name)
        for proc_type in sorted(grouped)
    }


def format_processes(app: str, pods: Iterable[Pod]) -> str:
    """Render the ``=== <app> Processes`` block."""
    lines = [f"=== {app} Processes\n"]
    for proc_type, members in group_processes(pods).items():
        lines.append(f"--- {proc_type}:\n")
        lines.extend(f"{pod.name} {pod.state} ({pod.release})\n" for pod in members)
    return "".join(lines)


def format_listing(header: str, items: Sequence[str], total: int) -> str:
    """Render a ``=== header`` listing followed by one item per line."""
    body = "".join(f"{item}\n" for item in items)
    return f"=== {header}{limit_count(len(items), total)}{body}"


def format_key(key_id: str, public: str) -> str:
    """Render an SSH key as ``<id> <first 16>...<last 10>``."""
    return f"{key_id} {public[:16]}...{public[-10:]}"


__all__ = [
    "format_config",
    "format_config_oneline",
    "format_expiry",
    "format_key",
    "format_listing",
    "format_processes",
    "format_value",
    "group_processes",
    "limit_count",
    "parse_timestamp",
    "pretty_tabs",
    "short_date",
    "short_fingerprint",
    "tabulate",
]
