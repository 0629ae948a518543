from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from markupsafe import Markup, escape

_ID_INVALID_RE = re.compile(r"[^-a-zA-Z0-9:.]")

BOOLEAN_ATTRIBUTES = {
    "disabled",
    "selected",
    "multiple",
    "required",
    "readonly",
    "autofocus",
    "checked",
}


def tag_attributes(attrs: Optional[Mapping[str, Any]]) -> Markup:
    """Render ``attrs`` as a leading-space attribute string.

    ``None`` and ``False`` values are skipped; ``True`` renders as
    ``name="name"`` for boolean attributes.
    """

    if not attrs:
        return Markup("")
    parts: list[str] = []
    for name, value in attrs.items():
        if value is None or value is False:
            continue
        if value is True:
            value = name if name in BOOLEAN_ATTRIBUTES else "true"
        parts.append(f' {escape(str(name))}="{escape(value)}"')
    return Markup("".join(parts))


def content_tag(name: str, content: Any = "", attrs: Optional[Mapping[str, Any]] = None) -> Markup:
    """Render ``<name attrs>content</name>``; ``content`` is escaped unless Markup."""

    return Markup(f"<{name}{tag_attributes(attrs)}>{escape(content)}</{name}>")


def tag(name: str, attrs: Optional[Mapping[str, Any]] = None) -> Markup:
    """Render a void element such as ``<input ...>``."""

    return Markup(f"<{name}{tag_attributes(attrs)}>")


def sanitize_to_id(name: Any) -> str:
    """``object[country_code]`` -> ``object_country_code``."""

    return _ID_INVALID_RE.sub("_", str(name).replace("]", ""))
