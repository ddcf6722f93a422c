"""Reading of simple ``key = value`` configuration files."""

from __future__ import annotations

import logging
import os

log = logging.getLogger(__name__)


def read_config(path: str | os.PathLike[str]) -> dict[str, str]:
    """Read a ``key = value`` file and return its entries sorted by key.

    Blank lines and lines starting with ``#`` are ignored; malformed lines and
    lines with an empty key are skipped with a warning.  Raises ``OSError``
    when the file cannot be opened and ``ValueError`` when it holds no entries.
    """
    entries: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for number, line in enumerate(handle, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            key, separator, value = stripped.partition("=")
            if not separator:
                log.warning("Invalid format at line %d: %s", number, line.rstrip("\n"))
                continue
            key = key.strip()
            if not key:
                log.warning("Empty key at line %d", number)
                continue
            entries[key] = value.strip()

    if not entries:
        raise ValueError(f"No valid configuration entries found in {path}")
    return dict(sorted(entries.items()))