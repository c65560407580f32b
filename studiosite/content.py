from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import markdown

FrontMatterValue = Union[str, list]

FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
HEADING_RE = re.compile(r"^#[ \t]+(?P<title>.+?)[ \t#]*$")
TRAILING_US_RE = re.compile(r"us$")
WHITESPACE_RE = re.compile(r"\s+")
PARAGRAPH_RE = re.compile(r"^<p>(?P<inner>.*)</p>$", re.DOTALL)
EMPTY_LIST = "[]"

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "nl2br", "codehilite"]
MARKDOWN_CONFIG = {"codehilite": {"guess_lang": False}}


@dataclass(frozen=True)
class ContentRecord:
    source_path: Path
    frontmatter: dict = field(default_factory=dict)
    body: str = ""

    def get(self, key: str, default: FrontMatterValue = "") -> FrontMatterValue:
        return self.frontmatter.get(key, default)


@dataclass(frozen=True)
class Section:
    id: str
    title: str
    body: str


def normalize_newlines(text: str) -> str:
    return text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def parse_front_matter(text: str) -> tuple[dict, str]:
    """Split ``text`` into a frontmatter mapping and the markdown body.

    The block must open with a line of exactly ``---`` and close with another.
    Inside it, ``key: value`` lines set scalars and ``- item`` lines append to
    the list of the most recently inserted key. An unquoted ``[]`` value is an
    empty list. Anything else is dropped.
    """
    clean_text = normalize_newlines(text)
    lines = clean_text.split("\n")
    if not lines or lines[0] != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i] == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    meta: dict = {}
    for line in lines[1:end]:
        line = line.strip()
        if not line:
            continue
        if line.startswith("-"):
            if not meta:
                continue
            last_key = next(reversed(meta))
            if not isinstance(meta[last_key], list):
                meta[last_key] = []
            meta[last_key].append(line[1:].strip())
            continue
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        meta[key] = [] if value == EMPTY_LIST else strip_quotes(value)
    body = "\n".join(lines[end + 1 :])
    return meta, body


def serialize_front_matter(meta: dict) -> str:
    lines = ["---"]
    for key, value in meta.items():
        if isinstance(value, list):
            lines.append(f"{key}:" if value else f"{key}: {EMPTY_LIST}")
            lines.extend(f"- {item}" for item in value)
        else:
            lines.append(f'{key}: "{value}"')
    lines.append("---")
    return "\n".join(lines) + "\n"


def read_content(path: Path) -> ContentRecord:
    meta, body = parse_front_matter(path.read_text(encoding="utf-8"))
    return ContentRecord(source_path=path, frontmatter=meta, body=body)


def section_slug(title: str) -> str:
    slug = title.strip().lower()
    slug = TRAILING_US_RE.sub("", slug)
    return WHITESPACE_RE.sub("", slug)


def split_sections(body: str) -> list[Section]:
    """Cut the home page body at its top-level ``# Title`` headings."""
    sections: list[Section] = []
    title = None
    span: list[str] = []
    in_fence = False
    fence_marker = ""

    def flush() -> None:
        if title is not None:
            sections.append(Section(section_slug(title), title, "\n".join(span).strip("\n")))

    for line in normalize_newlines(body).split("\n"):
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
        heading = None if in_fence else HEADING_RE.match(line)
        if heading:
            flush()
            title = heading.group("title")
            span = []
            continue
        span.append(line)
    flush()
    return sections


def parse_embedded_list(text: str, key: str) -> tuple[list[str], str]:
    """Pull a ``key:`` list out of a section body.

    Returns the ``- item`` values following the ``key:`` line and the body with
    those lines removed. Without a ``key:`` line the body is returned as is.
    """
    lines = text.split("\n")
    items: list[str] = []
    kept: list[str] = []
    collecting = False
    found = False
    for line in lines:
        stripped = line.strip()
        if not found and stripped == f"{key}:":
            collecting = True
            found = True
            continue
        if collecting:
            if stripped.startswith("-"):
                items.append(stripped[1:].strip())
                continue
            if not stripped:
                continue
            collecting = False
        kept.append(line)
    return items, "\n".join(kept).strip("\n")


def convert_markdown(text: str) -> str:
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS, extension_configs=MARKDOWN_CONFIG)
    return md.convert(text)


def convert_inline(text: str) -> str:
    html_text = convert_markdown(text.strip())
    match = PARAGRAPH_RE.match(html_text)
    return match.group("inner") if match else html_text
