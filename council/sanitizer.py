"""Harden raw user text before it reaches any completion backend."""

import re
import unicodedata

MAX_PROMPT_CHARS = 2000

_KEEP_CONTROLS = {"\n", "\t"}
_LINE_BREAKS = {"\u2028", "\u2029", "\x85"}

_ROLE_MARKER = re.compile(
    r"^\s*(system|assistant|user|developer|human|ai)\s*:",
    re.IGNORECASE,
)
_FENCE = re.compile(r"`{3,}|~{3,}")
_SPECIAL_TOKEN = re.compile(r"<\|([^|<>]{0,64})\|>")
_STRAY_TOKEN_EDGE = re.compile(r"<\||\|>")
_DATA_TAG = re.compile(r"<\s*(/?)\s*user_request\s*/?\s*>", re.IGNORECASE)


def _strip_invisible(text: str) -> str:
    """Drop C0/C1 controls (except newline and tab) and format characters."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    out: list[str] = []
    for ch in text:
        if ch in _LINE_BREAKS:
            out.append("\n")
            continue
        if ch in _KEEP_CONTROLS:
            out.append(ch)
            continue
        if unicodedata.category(ch) in ("Cc", "Cf"):
            continue
        out.append(ch)
    return "".join(out)


def _quote_role_lines(text: str) -> str:
    lines = []
    for line in text.split("\n"):
        if _ROLE_MARKER.match(line):
            quoted = line.strip().replace('"', "'")
            line = f'User wrote: "{quoted}"'
        lines.append(line)
    return "\n".join(lines)


def _defuse_markers(text: str) -> str:
    text = _FENCE.sub("'''", text)
    text = _DATA_TAG.sub(lambda m: f"[{m.group(1)}user_request]", text)
    text = _SPECIAL_TOKEN.sub(lambda m: f"[{m.group(1)}]", text)
    return _STRAY_TOKEN_EDGE.sub(lambda m: "<" if m.group(0) == "<|" else ">", text)


def sanitize_prompt(raw: object) -> str:
    """Return a best-effort cleaned copy of ``raw``, at most 2000 characters.

    Control and zero-width characters are removed, role-impersonation lines
    are rewritten as quoted user speech, code fences and special-token
    markers are defused, and the <user_request> tags that delimit user
    text in the prompt templates are rewritten so they cannot be closed
    from inside. Never raises.
    """
    if raw is None:
        return ""
    text = raw if isinstance(raw, str) else str(raw)
    text = _strip_invisible(text)
    text = _quote_role_lines(text)
    text = _defuse_markers(text)
    return text.strip()[:MAX_PROMPT_CHARS]
