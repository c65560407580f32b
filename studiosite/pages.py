from __future__ import annotations

from typing import Optional

from .classify import CollectionEntry, SiteContent, SpecialPage
from .config import SiteConfig
from .content import ContentRecord, Section, convert_inline, convert_markdown, parse_embedded_list, split_sections
from .render import Templates, fix_relative_img_src, render_template, replace_main
from .utils import as_list, as_text, warn

ASSET_ROOT = "/assets"
BACKGROUNDS = ("light", "dark")
CONTACTS_ID = "contacts"
# (marker, embeddable replacement); already-embeddable forms map to themselves.
VIDEO_HOSTS = (
    ("youtube.com/embed/", "youtube.com/embed/"),
    ("player.vimeo.com/video/", "player.vimeo.com/video/"),
    ("youtube.com/watch?v=", "youtube.com/embed/"),
    ("youtu.be/", "youtube.com/embed/"),
    ("vimeo.com/", "player.vimeo.com/video/"),
)


def asset_url(value: str) -> str:
    value = value.strip()
    if value.startswith(("http://", "https://", "data:", "/")):
        return value
    return f"{ASSET_ROOT}/{value}"


def render_chrome(templates: Templates, config: SiteConfig, title: str, is_project: bool) -> dict:
    context = {
        "title": title,
        "site_title": config.site_title,
        "isProject": is_project,
        "isHome": not is_project,
    }
    menu = render_template(templates.menu, **context)
    return {
        "menu": menu,
        "header": render_template(templates.header, menu=menu, **context),
        "footer": render_template(templates.footer, **context),
    }


def preview_image(entry: CollectionEntry) -> str:
    record = entry.record
    image = as_text(record.get("preview_image")).strip() or as_text(record.get("title_image")).strip()
    return image or f"{entry.name}.jpg"


def build_grid(entries: list[CollectionEntry]) -> str:
    cards = []
    for entry in entries:
        cards.append(
            '<div class="grid-item">'
            f'<a href="/{entry.collection}/{entry.name}/">'
            f'<img src="{asset_url(preview_image(entry))}" alt="{entry.title}">'
            "</a></div>"
        )
    return "".join(cards)


def classify_media(url: str) -> tuple[str, str]:
    """Return ``(media_type, resolved_url)`` for one ``media`` entry."""
    url = url.strip()
    for marker, embed in VIDEO_HOSTS:
        if marker in url:
            return "video", url.replace(marker, embed, 1)
    return "image", asset_url(url)


def build_media_grid(media: list[str]) -> str:
    if not media:
        return ""
    items = []
    for url in media:
        media_type, resolved = classify_media(url)
        if media_type == "video":
            element = f'<iframe src="{resolved}" frameborder="0" allowfullscreen></iframe>'
        else:
            element = f'<img src="{resolved}" alt="">'
        items.append(
            f'<div class="media-item {media_type}">'
            f"{element}"
            f'<div class="media-overlay" data-media-type="{media_type}" data-media-url="{resolved}"></div>'
            "</div>"
        )
    return f'<div class="media-grid">{"".join(items)}</div>'


def build_store_links(store: list[str]) -> str:
    if not store:
        return ""
    links = [
        f'<div class="store-link">{fix_relative_img_src(convert_inline(item), ASSET_ROOT)}</div>'
        for item in store
    ]
    return f'<div class="store-links">{"".join(links)}</div>'


def build_collection_section(section: Section, body: str, entries: list[CollectionEntry], collection: str) -> str:
    intro = convert_markdown(body) if body.strip() else ""
    return f'<h1>{section.title}</h1>{intro}<div class="{collection}-grid">{build_grid(entries)}</div>'


def build_contacts_section(section: Section, body: str, singleton: Optional[ContentRecord]) -> str:
    contacts, rest = parse_embedded_list(body, CONTACTS_ID)
    if not contacts and singleton is not None:
        contacts = as_list(singleton.get("contacts"))
    content = convert_markdown(f"# {section.title}\n\n{rest}")
    if contacts:
        items = "".join(
            f"<li>{fix_relative_img_src(convert_inline(item), ASSET_ROOT)}</li>" for item in contacts
        )
        content += f'<ul class="contacts">{items}</ul>'
    return content


def render_section(section: Section, site: SiteContent, config: SiteConfig) -> str:
    singleton = site.singletons.get(section.id)
    body = section.body
    if not body.strip() and singleton is not None:
        body = singleton.body.strip("\n")
    if section.id in config.collections:
        return build_collection_section(section, body, site.entries(section.id), section.id)
    if section.id == CONTACTS_ID:
        return build_contacts_section(section, body, singleton)
    return convert_markdown(f"# {section.title}\n\n{body}")


def build_sections(site: SiteContent, config: SiteConfig) -> list[dict]:
    """Render the ``#``-delimited blocks of ``index.md`` in document order."""
    sections = []
    for position, section in enumerate(split_sections(site.home.body)):
        sections.append(
            {
                "id": section.id,
                "background": BACKGROUNDS[position % len(BACKGROUNDS)],
                "content": render_section(section, site, config),
            }
        )
    section_ids = {section["id"] for section in sections}
    for name in site.singletons:
        if name not in section_ids:
            warn(f"{name}.md has no matching '# {name.title()}' section in index.md")
    return sections


def build_home(templates: Templates, site: SiteContent, config: SiteConfig) -> str:
    title = as_text(site.home.get("title")).strip() or config.site_title
    # Page variables win over a collection grid of the same name.
    context = {collection: build_grid(site.entries(collection)) for collection in config.collections}
    context.update(render_chrome(templates, config, title, False))
    context.update(
        title=title,
        site_title=config.site_title,
        sections=build_sections(site, config),
        isProject=False,
    )
    return render_template(templates.index, **context)


def build_entry(templates: Templates, entry: CollectionEntry, config: SiteConfig) -> str:
    record = entry.record
    title = entry.title
    release = as_text(record.get("release_data")).strip() or as_text(record.get("release_date")).strip()
    description = as_text(record.get("description")).strip()
    return render_template(
        templates.entry,
        **render_chrome(templates, config, title, True),
        title=title,
        site_title=config.site_title,
        name=entry.name,
        collection=entry.collection,
        preview_image=asset_url(preview_image(entry)),
        release_date=f'<p class="release-date">Release date: {release}</p>' if release else "",
        store=build_store_links(as_list(record.get("store"))),
        description=f'<div class="description">{convert_markdown(description)}</div>' if description else "",
        media=build_media_grid(as_list(record.get("media"))),
        content=convert_markdown(record.body) if record.body.strip() else "",
        isProject=True,
    )


def build_special_page(templates: Templates, page: SpecialPage, config: SiteConfig) -> str:
    record = page.record
    fallback = page.category.permalink.strip("/").rsplit("/", 1)[-1] or config.site_title
    title = as_text(record.get("title")).strip() or fallback
    content = convert_markdown(record.body)
    if not page.category.styled:
        return render_template(templates.bare, title=title, site_title=config.site_title, content=content)
    template = replace_main(templates.index, "{{content}}")
    context = {collection: "" for collection in config.collections}
    context.update(render_chrome(templates, config, title, True))
    context.update(title=title, site_title=config.site_title, content=content, isProject=True)
    return render_template(template, **context)
