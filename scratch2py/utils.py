import json
import os
from typing import Any


def safe_name(name: str, fallback: str = "item") -> str:
    sanitized = "".join(ch if ch.isalnum() or ch in "-_ " else "_" for ch in (name or ""))
    sanitized = sanitized.strip()
    return sanitized or fallback


def is_within(root: str, path: str) -> bool:
    """Whether ``path`` resolves to ``root`` or somewhere below it."""
    root = os.path.realpath(root)
    return os.path.commonpath([root, os.path.realpath(path)]) == root


def ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def write_text_file(path: str, text: str) -> None:
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text)


def load_json_file(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)
