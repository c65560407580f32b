from __future__ import annotations

from pathlib import Path

import pytest

from studiosite.config import SiteConfig

TEMPLATES = {
    "index.html": (
        "<html><head><title>{{title}}</title></head><body>{{header}}"
        "<main>{{#each sections}}"
        '<section id="{{id}}" class="{{background}}">{{content}}</section>'
        "{{/each}}</main>"
        '<div class="home-projects">{{projects}}</div>'
        "{{footer}}</body></html>"
    ),
    "entry.html": (
        "<html><head><title>{{title}}</title></head><body>{{header}}"
        "<main><h1>{{title}}</h1>{{release_date}}{{store}}{{description}}{{content}}{{media}}</main>"
        "{{footer}}</body></html>"
    ),
    "bare.html": "<html><head><title>{{title}}</title></head><body>{{content}}</body></html>",
    "header.html": '<header class="site-header">{{menu}}</header>',
    "menu.html": (
        "<nav>{{#if isProject}}<a href=\"/#about\">About</a>{{/if}}"
        "{{#if isHome}}<a href=\"#about\">About</a>{{/if}}</nav>"
    ),
    "footer.html": '<footer class="site-footer">{{site_title}}</footer>',
}


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    write_files(tmp_path / "templates", TEMPLATES)
    write_files(tmp_path / "styles", {"main.css": "body { margin: 0; }\n"})
    write_files(tmp_path / "assets", {"modal.js": "// modal\n"})
    write_files(tmp_path / "content", {"index.md": "---\ntitle: Studio\n---\n# About\nWe make games.\n"})
    return tmp_path


@pytest.fixture
def site_config(site_root: Path) -> SiteConfig:
    return SiteConfig(
        content_dir=site_root / "content",
        template_dir=site_root / "templates",
        styles_dir=site_root / "styles",
        assets_dir=site_root / "assets",
        images_dir=site_root / "images",
        output_dir=site_root / "site",
        site_title="Test Studio",
    )


@pytest.fixture
def write_content(site_root: Path):
    def write(files: dict[str, str]) -> None:
        write_files(site_root / "content", files)

    return write
