"""
Build event log parsing.

Bazel's --build_event_text_file output lists produced files as
`uri: "file:///...` entries; index stores end in `.indexstore`.
"""
import re
from pathlib import Path
from typing import List

from periphery_runner.errors import BuildFailure


INDEX_STORE_PATTERN = re.compile(r'uri: "file://(.+\.indexstore)')


def extract_index_stores(text: str) -> List[str]:
    """
    Extract unique index store paths from build event log text.

    Args:
        text: Build event log contents

    Returns:
        Index store paths in order of first appearance

    Examples:
        >>> extract_index_stores('uri: "file:///a/x.indexstore"\\nuri: "file:///a/x.indexstore"')
        ['/a/x.indexstore']
    """
    stores = []
    seen = set()

    for match in INDEX_STORE_PATTERN.finditer(text):
        path = match.group(1)
        if path not in seen:
            seen.add(path)
            stores.append(path)

    return stores


def read_event_log(path: Path) -> str:
    """Read the build event log, failing if bazel never wrote it."""
    if not path.is_file():
        raise BuildFailure(f"Build event log not found: {path}")

    return path.read_text(encoding='utf-8', errors='replace')
