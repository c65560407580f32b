from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .content import ContentRecord, read_content
from .utils import SORT_LAST, BuildError, as_text, parse_bool, parse_int, warn

HOME_FILE = "index.md"


@dataclass(frozen=True)
class Home:
    pass


@dataclass(frozen=True)
class Singleton:
    name: str


@dataclass(frozen=True)
class CollectionMember:
    collection: str
    name: str
    order: int = SORT_LAST


@dataclass(frozen=True)
class Permalinked:
    permalink: str
    styled: bool = True


ContentCategory = Union[Home, Singleton, CollectionMember, Permalinked]


@dataclass(frozen=True)
class CollectionEntry:
    record: ContentRecord
    category: CollectionMember

    @property
    def name(self) -> str:
        return self.category.name

    @property
    def collection(self) -> str:
        return self.category.collection

    @property
    def title(self) -> str:
        return as_text(self.record.get("title")).strip() or self.name


@dataclass(frozen=True)
class SpecialPage:
    record: ContentRecord
    category: Permalinked


@dataclass
class SiteContent:
    home: ContentRecord
    singletons: dict[str, ContentRecord] = field(default_factory=dict)
    collections: dict[str, list[CollectionEntry]] = field(default_factory=dict)
    special_pages: list[SpecialPage] = field(default_factory=list)

    def entries(self, collection: str) -> list[CollectionEntry]:
        return self.collections.get(collection, [])


def classify_file(
    path: Path,
    record: ContentRecord,
    content_dir: Path,
    collections: tuple[str, ...],
    singletons: tuple[str, ...],
) -> Optional[ContentCategory]:
    rel = path.relative_to(content_dir)
    if len(rel.parts) == 1 and rel.name == HOME_FILE:
        return Home()
    if len(rel.parts) == 1 and rel.suffix == ".md" and rel.stem in singletons:
        return Singleton(rel.stem)
    if len(rel.parts) == 2 and rel.parts[0] in collections and rel.suffix == ".md":
        order = parse_int(record.get("order", None), SORT_LAST)
        return CollectionMember(rel.parts[0], rel.stem, order)
    if rel.suffix == ".md" and "permalink" in record.frontmatter:
        permalink = as_text(record.get("permalink")).strip()
        return Permalinked(permalink, styled=not parse_bool(record.get("no_style", None)))
    return None


def sort_entries(entries: list[CollectionEntry]) -> list[CollectionEntry]:
    return sorted(entries, key=lambda entry: (entry.category.order, entry.name))


def load_site_content(
    content_dir: Path,
    collections: tuple[str, ...] = ("projects", "games"),
    singletons: tuple[str, ...] = ("about", "contacts"),
) -> SiteContent:
    """Read every content file under ``content_dir`` and sort it by category."""
    if not content_dir.is_dir():
        raise BuildError(f"Content directory not found: {content_dir}")
    home_path = content_dir / HOME_FILE
    if not home_path.is_file():
        raise BuildError(f"Home page source not found: {home_path}")

    site = SiteContent(home=read_content(home_path))
    grouped: dict[str, list[CollectionEntry]] = {name: [] for name in collections}
    for path in sorted(content_dir.rglob("*"), key=lambda p: p.as_posix()):
        if not path.is_file() or path == home_path:
            continue
        rel = path.relative_to(content_dir)
        if path.suffix != ".md":
            if len(rel.parts) == 2 and rel.parts[0] in collections:
                warn(f"Skipping non-markdown file in collection: {rel.as_posix()}")
            continue
        record = read_content(path)
        category = classify_file(path, record, content_dir, collections, singletons)
        if isinstance(category, Singleton):
            site.singletons[category.name] = record
        elif isinstance(category, CollectionMember):
            grouped[category.collection].append(CollectionEntry(record, category))
        elif isinstance(category, Permalinked):
            site.special_pages.append(SpecialPage(record, category))
        else:
            warn(f"Ignoring unclassified content file: {rel.as_posix()}")
    site.collections = {name: sort_entries(entries) for name, entries in grouped.items()}
    return site
