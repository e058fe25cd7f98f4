"""Utility functions for dockerpipe."""
import os
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional


def parse_key_value_pairs(pairs: Iterable[str]) -> Dict[str, str]:
    """Parse KEY=VALUE entries, ignoring entries without a separator."""
    parsed = {}
    for pair in pairs:
        key, sep, value = pair.strip().partition('=')
        if sep and key:
            parsed[key] = value
    return parsed


def split_csv(value: Optional[str]) -> list:
    """Split a comma-separated string into stripped, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def expand_home(path: str) -> str:
    """Expand a leading `~/` in a path."""
    if path.startswith('~/'):
        return os.path.join(os.path.expanduser('~'), path[2:])
    return path


def normalize_image_reference(reference: str) -> str:
    """Append the implicit `latest` tag to an untagged image reference."""
    reference = reference.strip()
    if not reference:
        return reference
    last_segment = reference.rsplit('/', 1)[-1]
    if ':' not in last_segment and '@' not in last_segment:
        return f"{reference}:latest"
    return reference


def parse_created_at(created_str: str) -> Optional[datetime]:
    """Parse docker's `CreatedAt` field, e.g. `2024-05-01 10:15:00 +0200 CEST`."""
    parts = created_str.strip().split()
    if len(parts) < 2:
        return None
    try:
        if len(parts) >= 3 and parts[2][:1] in '+-':
            return datetime.strptime(' '.join(parts[:3]), '%Y-%m-%d %H:%M:%S %z')
        created = datetime.strptime(' '.join(parts[:2]), '%Y-%m-%d %H:%M:%S')
        return created.replace(tzinfo=timezone.utc)
    except ValueError:
        return None
