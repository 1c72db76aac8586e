"""Clipboard adapter for Word-pasteable HTML.

``copy_word_html_to_clipboard`` tries a rich HTML write first and degrades to
plain text. The concrete backend is injected; ``Win32Clipboard`` is the
Windows implementation (CF_HTML + CF_UNICODETEXT via pywin32).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ClipboardBackend(Protocol):
    async def write_html(self, html: str) -> None: ...

    async def write_text(self, text: str) -> None: ...


async def copy_word_html_to_clipboard(html: str, clipboard: ClipboardBackend) -> bool:
    """Put *html* on the clipboard. Returns False when every write failed."""
    try:
        await clipboard.write_html(html)
        return True
    except Exception as e:
        logger.warning("Rich clipboard write failed, falling back to text: %s", e)

    try:
        await clipboard.write_text(html)
        return True
    except Exception as e:
        logger.error("Clipboard write failed: %s", e)
        return False


# ── CF_HTML ───────────────────────────────────────────────────────────

_CF_HTML_HEADER_TEMPLATE = (
    "Version:0.9\r\n"
    "StartHTML:{sh:09d}\r\n"
    "EndHTML:{eh:09d}\r\n"
    "StartFragment:{sf:09d}\r\n"
    "EndFragment:{ef:09d}\r\n"
)

_START_MARKER = "<!--StartFragment-->"
_END_MARKER = "<!--EndFragment-->"


def _wrap_fragment(html: str) -> str:
    """Surround the body content of *html* with fragment markers."""
    lower = html.lower()
    body_open = lower.find("<body")
    body_start = lower.find(">", body_open) + 1 if body_open >= 0 else -1
    body_end = lower.rfind("</body>")
    if body_start <= 0 or body_end < body_start:
        return f"<html><body>{_START_MARKER}{html}{_END_MARKER}</body></html>"
    return (
        html[:body_start] + _START_MARKER
        + html[body_start:body_end] + _END_MARKER
        + html[body_end:]
    )


def make_cf_html(html: str) -> bytes:
    """Encode an HTML document or fragment as a CF_HTML clipboard blob.

    Offsets in the header are byte positions in the UTF-8 payload and are
    always written with nine digits, so the header length is fixed.
    """
    document = _wrap_fragment(html).encode("utf-8")
    header_len = len(_CF_HTML_HEADER_TEMPLATE.format(sh=0, eh=0, sf=0, ef=0).encode("utf-8"))

    sf = header_len + document.index(_START_MARKER.encode("ascii")) + len(_START_MARKER)
    ef = header_len + document.index(_END_MARKER.encode("ascii"))
    header = _CF_HTML_HEADER_TEMPLATE.format(
        sh=header_len, eh=header_len + len(document), sf=sf, ef=ef,
    )
    return header.encode("utf-8") + document


class Win32Clipboard:
    """Windows system clipboard through pywin32."""

    def __init__(self):
        import win32clipboard

        self._win32clipboard = win32clipboard
        self._cf_html = win32clipboard.RegisterClipboardFormat("HTML Format")

    def _set(self, fmt: int, data) -> None:
        cb = self._win32clipboard
        cb.OpenClipboard()
        try:
            cb.EmptyClipboard()
            cb.SetClipboardData(fmt, data)
        finally:
            cb.CloseClipboard()

    async def write_html(self, html: str) -> None:
        await asyncio.to_thread(self._set, self._cf_html, make_cf_html(html))

    async def write_text(self, text: str) -> None:
        await asyncio.to_thread(self._set, self._win32clipboard.CF_UNICODETEXT, text)
