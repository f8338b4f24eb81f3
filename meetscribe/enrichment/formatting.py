from __future__ import annotations

"""
Format raw model text into sanitized display markup.

Design intent:
- Escape everything the model produced before adding any markup.
- Support the small markdown subset models actually emit (headings,
  bullet/numbered lists, bold) and nothing else.
- Keep output deterministic for the same input.
"""

import html
import re

_HEADING_RE = re.compile(r"^#{1,6}\s+(.*)$")
_BULLET_RE = re.compile(r"^(?:[-*•])\s+(.*)$")
_NUMBERED_RE = re.compile(r"^\d+[.)]\s+(.*)$")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")


def _inline(text: str) -> str:
    return _BOLD_RE.sub(r"<strong>\1</strong>", html.escape(text.strip(), quote=True))


def format_for_display(raw_text: str) -> str:
    if not (raw_text or "").strip():
        return ""

    out: list[str] = []
    open_list: str | None = None
    paragraph: list[str] = []

    def _flush_paragraph() -> None:
        if paragraph:
            out.append(f"<p>{'<br>'.join(paragraph)}</p>")
            paragraph.clear()

    def _close_list() -> None:
        nonlocal open_list
        if open_list is not None:
            out.append(f"</{open_list}>")
            open_list = None

    for line in raw_text.replace("\r\n", "\n").split("\n"):
        stripped = line.strip()
        if not stripped:
            _flush_paragraph()
            _close_list()
            continue

        heading = _HEADING_RE.match(stripped)
        bullet = _BULLET_RE.match(stripped)
        numbered = _NUMBERED_RE.match(stripped)

        if heading:
            _flush_paragraph()
            _close_list()
            out.append(f"<h4>{_inline(heading.group(1))}</h4>")
        elif bullet or numbered:
            _flush_paragraph()
            tag = "ul" if bullet else "ol"
            if open_list != tag:
                _close_list()
                out.append(f"<{tag}>")
                open_list = tag
            item = (bullet or numbered).group(1)
            out.append(f"<li>{_inline(item)}</li>")
        else:
            _close_list()
            paragraph.append(_inline(stripped))

    _flush_paragraph()
    _close_list()
    return "".join(out)


def error_fragment(message: str) -> str:
    return f'<p class="error">Could not generate content: {html.escape(message or "", quote=True)}</p>'
