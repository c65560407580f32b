from __future__ import annotations

import shutil
from pathlib import Path, PurePosixPath

from .config import SiteConfig
from .utils import BuildError

INDEX_FILE = "index.html"
STYLESHEET = "main.css"


def home_output_path() -> Path:
    return Path(INDEX_FILE)


def collection_output_path(collection: str, name: str) -> Path:
    return Path(collection) / name / INDEX_FILE


def permalink_output_path(permalink: str) -> Path:
    """Map ``/foo/bar`` (or ``/foo/bar/``) to ``foo/bar/index.html``."""
    cleaned = permalink.strip().strip("/")
    parts = [part for part in PurePosixPath(cleaned).parts if part not in {"", "."}]
    if not parts:
        raise BuildError(f"Permalink {permalink!r} resolves to the site root")
    if ".." in parts:
        raise BuildError(f"Permalink {permalink!r} escapes the output directory")
    return Path(*parts) / INDEX_FILE


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def write_page(output_dir: Path, rel_path: Path, html_doc: str) -> Path:
    dest = output_dir / rel_path
    write_text(dest, html_doc)
    print(f"  Built: {rel_path.as_posix()}")
    return dest


def copy_tree(source_dir: Path, dest_dir: Path) -> None:
    dest_dir.mkdir(parents=True, exist_ok=True)
    for item in source_dir.iterdir():
        dest = dest_dir / item.name
        if item.is_dir():
            if dest.exists():
                shutil.rmtree(dest)
            shutil.copytree(item, dest)
        else:
            shutil.copy2(item, dest)


def copy_assets(config: SiteConfig) -> None:
    stylesheet = config.styles_dir / STYLESHEET
    if not stylesheet.is_file():
        raise BuildError(f"Stylesheet not found: {stylesheet}")
    config.output_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(stylesheet, config.output_dir / STYLESHEET)
    if config.images_dir.is_dir():
        copy_tree(config.images_dir, config.output_dir / "images")
    if config.assets_dir.is_dir():
        copy_tree(config.assets_dir, config.output_dir / "assets")


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise BuildError("Refusing to clean project root.")
    if not output_resolved.is_relative_to(root_resolved):
        raise BuildError("Refusing to clean output directory outside project root.")
    shutil.rmtree(output_dir)
