"""Turn flat generated lines into nested Python.

Handlers never indent their own output. A line ending in ":" opens a
body, and the dedent sentinel closes the innermost one.
"""

from typing import List

from .constants import DEDENT_SENTINEL


def format_indentation(text: str, indent: str = "    ", level: int = 0) -> str:
    lines: List[str] = []

    for raw in text.split("\n"):
        line = raw.strip()

        if DEDENT_SENTINEL in line:
            level = max(level - 1, 0)
            line = line.replace(DEDENT_SENTINEL, "").strip()
            if not line:
                continue

        if not line:
            lines.append("")
            continue

        lines.append(indent * level + line)

        # Comments never open a body, even if they end in a colon.
        if line.endswith(":") and not line.startswith("#"):
            level += 1

    return "\n".join(lines)
