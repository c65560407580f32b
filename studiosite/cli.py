from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .classify import load_site_content
from .config import SiteConfig, config_from_mapping, load_config
from .pages import build_entry, build_home, build_special_page
from .render import load_templates
from .serve import serve
from .utils import BuildError, parse_bool, parse_int, warn
from .writer import (
    clean_output_dir,
    collection_output_path,
    copy_assets,
    home_output_path,
    permalink_output_path,
    write_page,
)


def build_site(config: SiteConfig) -> list[Path]:
    templates = load_templates(config.template_dir)
    site = load_site_content(config.content_dir, config.collections, config.singletons)
    output_dir = config.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    content_dir = config.content_dir
    sources: dict[Path, str] = {}
    written: list[Path] = []

    def emit(rel_path: Path, source: Path, html_doc: str) -> None:
        label = source.relative_to(content_dir).as_posix()
        if rel_path in sources:
            warn(f"{label} overwrites {rel_path.as_posix()} already written from {sources[rel_path]}")
        sources[rel_path] = label
        written.append(write_page(output_dir, rel_path, html_doc))

    emit(home_output_path(), site.home.source_path, build_home(templates, site, config))
    for collection in config.collections:
        for entry in site.entries(collection):
            emit(
                collection_output_path(collection, entry.name),
                entry.record.source_path,
                build_entry(templates, entry, config),
            )
    for page in site.special_pages:
        emit(
            permalink_output_path(page.category.permalink),
            page.record.source_path,
            build_special_page(templates, page, config),
        )
    copy_assets(config)
    return written


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config_path = Path(pre_args.config).resolve()
    try:
        raw_config = load_config(config_path)
        config = config_from_mapping(raw_config, config_path.parent)
    except BuildError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    parser = argparse.ArgumentParser(description="Markdown game studio site generator.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--content", default=config.content_dir, type=Path, help="Directory containing Markdown content.")
    parser.add_argument("--templates", default=config.template_dir, type=Path, help="Directory containing HTML templates.")
    parser.add_argument("--styles", default=config.styles_dir, type=Path, help="Directory containing main.css.")
    parser.add_argument("--assets", default=config.assets_dir, type=Path, help="Directory copied to assets/.")
    parser.add_argument("--images", default=config.images_dir, type=Path, help="Directory copied to images/.")
    parser.add_argument("--output", default=config.output_dir, type=Path, help="Output directory for the site.")
    parser.add_argument("--site-title", default=config.site_title, help="Fallback page title.")
    parser.add_argument("--host", default=config.host, help="Preview server host.")
    parser.add_argument("--port", default=config.port, type=int, help="Preview server port.")
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=parse_bool(raw_config.get("clean", False)),
        help="Clean output directory before build.",
    )
    parser.add_argument(
        "--serve",
        action=argparse.BooleanOptionalAction,
        default=parse_bool(raw_config.get("serve", True)),
        help="Serve the output directory after the build.",
    )
    args = parser.parse_args(argv)

    config = config.with_overrides(
        content_dir=args.content,
        template_dir=args.templates,
        styles_dir=args.styles,
        assets_dir=args.assets,
        images_dir=args.images,
        output_dir=args.output,
        site_title=args.site_title,
        host=args.host,
        port=parse_int(args.port, config.port),
    )

    start = time.perf_counter()
    try:
        if args.clean:
            clean_output_dir(config.output_dir, Path.cwd())
        written = build_site(config)
    except BuildError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"\nBuilt {len(written)} page(s) in {elapsed:.2f}s.")
    print(f"Site generated in: {config.output_dir}")
    if args.serve:
        serve(config)
