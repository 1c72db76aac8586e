import logging

import pytest

from mathpaste.core.clipboard import copy_word_html_to_clipboard, make_cf_html


class FakeClipboard:
    def __init__(self, fail_html: bool = False, fail_text: bool = False):
        self.fail_html = fail_html
        self.fail_text = fail_text
        self.html = None
        self.text = None

    async def write_html(self, html: str) -> None:
        if self.fail_html:
            raise OSError("rich clipboard unavailable")
        self.html = html

    async def write_text(self, text: str) -> None:
        if self.fail_text:
            raise OSError("clipboard locked")
        self.text = text


def _header_offsets(blob: bytes) -> dict[str, int]:
    offsets = {}
    for line in blob.split(b"\r\n")[1:5]:
        name, value = line.decode("ascii").split(":")
        offsets[name] = int(value)
    return offsets


@pytest.mark.asyncio
async def test_rich_write():
    cb = FakeClipboard()
    assert await copy_word_html_to_clipboard("<p>x</p>", cb) is True
    assert cb.html == "<p>x</p>"
    assert cb.text is None


@pytest.mark.asyncio
async def test_falls_back_to_plain_text():
    cb = FakeClipboard(fail_html=True)
    assert await copy_word_html_to_clipboard("<p>x</p>", cb) is True
    assert cb.text == "<p>x</p>"


@pytest.mark.asyncio
async def test_total_failure_is_logged_and_reported(caplog):
    cb = FakeClipboard(fail_html=True, fail_text=True)
    with caplog.at_level(logging.ERROR, logger="mathpaste.core.clipboard"):
        assert await copy_word_html_to_clipboard("<p>x</p>", cb) is False
    assert any("Clipboard write failed" in r.message for r in caplog.records)


def test_cf_html_offsets_point_at_body_content():
    html = '<!DOCTYPE html><html><head><title>t</title></head><body><p>é = ∑</p></body></html>'
    blob = make_cf_html(html)
    offsets = _header_offsets(blob)

    assert blob.startswith(b"Version:0.9\r\nStartHTML:")
    assert blob[offsets["StartHTML"]:].startswith(b"<!DOCTYPE html>")
    assert offsets["EndHTML"] == len(blob)
    fragment = blob[offsets["StartFragment"]:offsets["EndFragment"]].decode("utf-8")
    assert fragment == "<p>é = ∑</p>"


def test_cf_html_wraps_bare_fragment():
    blob = make_cf_html("<b>bold</b>")
    offsets = _header_offsets(blob)
    assert blob[offsets["StartFragment"]:offsets["EndFragment"]] == b"<b>bold</b>"
    assert blob.endswith(b"<!--EndFragment--></body></html>")
