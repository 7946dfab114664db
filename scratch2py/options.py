"""Caller-supplied settings for a compilation, all with working defaults."""

from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import urlparse

from .utils import safe_name

DEFAULT_RUNTIME_URL = "https://unpkg.com/martypy@^1/dist/index.py"
DEFAULT_STYLESHEET_URL = "https://unpkg.com/martypy@^1/dist/index.css"


def default_target_path(name: str, relationship: str) -> str:
    """Where a target's module lives, seen from the entry file or a sibling."""
    if relationship == "index":
        return f"./{name}/{name}.py"
    return f"../{name}/{name}.py"


def default_asset_url(asset_type: str, target_name: str, asset_name: str, md5: str, ext: str) -> str:
    folder = "costumes" if asset_type == "costume" else "sounds"
    return f"./{target_name}/{folder}/{safe_name(asset_name, md5)}.{ext}"


def is_absolute_reference(destination: str) -> bool:
    """External URLs and root-relative paths are used untouched."""
    parsed = urlparse(destination)
    return bool(parsed.scheme or parsed.netloc) or destination.startswith("/")


def relative_reference(destination: str, relationship: str) -> str:
    """Point a configured path at the right place from the given file."""
    if is_absolute_reference(destination):
        return destination
    if relationship == "index":
        return "./" + destination
    return "../" + destination


@dataclass
class TranspileOptions:
    runtime_url: str = DEFAULT_RUNTIME_URL
    stylesheet_url: str = DEFAULT_STYLESHEET_URL
    get_target_path: Callable[[str, str], str] = field(default=default_target_path)
    get_asset_url: Callable[[str, str, str, str, str], str] = field(default=default_asset_url)
    index_path: str = "./index.py"
    autoplay: bool = True
    indent: str = "    "
