"""Markup → plain text for oracle consumption.

Deliberately naive: the oracle reads prose, so keeping visible text and
dropping everything else is enough. The truncated result is the only
evidence the oracle ever sees.

Control characters (NUL included) never survive: PostgreSQL TEXT rejects
0x00, and a binary source such as a PDF must still produce an audit row.
"""

import re

MAX_TEXT_CHARS = 50_000

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
# C0 controls and DEL, keeping \t \n \r
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Order matters: &amp; last so "&amp;lt;" stays the literal "&lt;"
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def strip_control_chars(text: str, replacement: str = " ") -> str:
    return _CONTROL_RE.sub(replacement, text)


def to_plain_text(raw: str, max_chars: int = MAX_TEXT_CHARS) -> str:
    text = strip_control_chars(raw)
    text = _SCRIPT_RE.sub("", text)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    text = _WS_RE.sub(" ", text).strip()
    return text[:max_chars]
