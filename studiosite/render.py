from __future__ import annotations

import re
from collections import ChainMap
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping

from .utils import BuildError, TemplateError

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
TAG_RE = re.compile(
    r"\{\{(?:#(?P<open>each|if)\s+(?P<block>[A-Za-z_]\w*)|/(?P<close>each|if)|(?P<name>[A-Za-z_]\w*))\}\}"
)
MAIN_RE = re.compile(r"(<main\b[^>]*>)(.*?)(</main>)", re.IGNORECASE | re.DOTALL)

TEMPLATE_FILES = {
    "index": "index.html",
    "entry": "entry.html",
    "bare": "bare.html",
    "header": "header.html",
    "menu": "menu.html",
    "footer": "footer.html",
}


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Placeholder:
    name: str


@dataclass(frozen=True)
class Each:
    name: str
    children: tuple = ()


@dataclass(frozen=True)
class If:
    name: str
    children: tuple = ()


@lru_cache(maxsize=64)
def parse_template(template: str) -> tuple:
    """Parse ``template`` into a tuple of nodes.

    Raises ``TemplateError`` for a closing tag without an opener, a closing tag
    of the wrong kind, or a block left open at the end of the template.
    """
    stack: list[tuple[str, str, list]] = []
    current: list = []
    pos = 0
    for match in TAG_RE.finditer(template):
        if match.start() > pos:
            current.append(Text(template[pos : match.start()]))
        pos = match.end()
        if match.group("name"):
            current.append(Placeholder(match.group("name")))
        elif match.group("open"):
            stack.append((match.group("open"), match.group("block"), current))
            current = []
        else:
            kind = match.group("close")
            if not stack:
                raise TemplateError(f"Unexpected {{{{/{kind}}}}} at offset {match.start()}")
            open_kind, name, parent = stack.pop()
            if open_kind != kind:
                raise TemplateError(f"{{{{#{open_kind} {name}}}}} closed by {{{{/{kind}}}}}")
            node_type = Each if kind == "each" else If
            parent.append(node_type(name, tuple(current)))
            current = parent
    if stack:
        open_kind, name, _ = stack[-1]
        raise TemplateError(f"Unclosed {{{{#{open_kind} {name}}}}}")
    if pos < len(template):
        current.append(Text(template[pos:]))
    return tuple(current)


def render_nodes(nodes: tuple, context: Mapping[str, object]) -> str:
    out: list[str] = []
    for node in nodes:
        if isinstance(node, Text):
            out.append(node.value)
        elif isinstance(node, Placeholder):
            if node.name in context:
                value = context[node.name]
                out.append("" if value is None else str(value))
            else:
                out.append(f"{{{{{node.name}}}}}")
        elif isinstance(node, Each):
            for item in context.get(node.name) or []:
                scope = item if isinstance(item, Mapping) else {"this": item}
                out.append(render_nodes(node.children, ChainMap(scope, context)))
        elif isinstance(node, If):
            if context.get(node.name):
                out.append(render_nodes(node.children, context))
    return "".join(out)


def render_template(template: str, **context: object) -> str:
    return render_nodes(parse_template(template), context)


def replace_main(template: str, replacement: str) -> str:
    match = MAIN_RE.search(template)
    if not match:
        raise TemplateError("Template has no <main> element to hold page content")
    return template[: match.start(2)] + replacement + template[match.end(2) :]


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        return f'<img{attrs}src="{root}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


@dataclass(frozen=True)
class Templates:
    index: str
    entry: str
    bare: str
    header: str
    menu: str
    footer: str


def read_template(path: Path) -> str:
    if not path.is_file():
        raise BuildError(f"Template not found: {path}")
    return path.read_text(encoding="utf-8")


def load_templates(template_dir: Path) -> Templates:
    if not template_dir.is_dir():
        raise BuildError(f"Templates directory not found: {template_dir}")
    loaded = {key: read_template(template_dir / name) for key, name in TEMPLATE_FILES.items()}
    for text in loaded.values():
        parse_template(text)
    return Templates(**loaded)
