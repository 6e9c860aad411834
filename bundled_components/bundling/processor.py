"""Collects component assets and hands them to the asset compiler."""

from __future__ import annotations

import json
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config import PluginOptions
from ..logging import get_logger
from ..models import BundledAssets, Component
from .compiler import AssetCompiler, CompilationError, EsbuildCompiler, PostCSSProcessor

_CSS_BUNDLE_NAME = "__bundle__.css"
_JS_ENTRY_NAME = "__entry__.js"

logger = get_logger("bundling")


def collect_asset_entries(
    components: Sequence[Component],
    project_root: Path,
    options: PluginOptions,
) -> tuple[List[Path], List[Path]]:
    """Return existing CSS and JS files: main entries first, de-duplicated by path."""
    css: Dict[Path, None] = {}
    js: Dict[Path, None] = {}

    main_css = _main_entry(options.main_css_entry, project_root)
    if main_css is not None:
        css[main_css] = None
    main_js = _main_entry(options.main_js_entry, project_root)
    if main_js is not None:
        js[main_js] = None

    for component in components:
        for style in component.styles:
            path = (component.path / style).resolve()
            if path.is_file():
                css.setdefault(path, None)
            else:
                logger.debug("Style %s of component %s does not exist", path, component.name)
        for script in component.scripts:
            path = (component.path / script).resolve()
            if path.is_file():
                js.setdefault(path, None)
            else:
                logger.debug("Script %s of component %s does not exist", path, component.name)

    return list(css), list(js)


def bundle_components(
    partials: Sequence[Component],
    sections: Sequence[Component],
    project_root: Path | str,
    options: PluginOptions,
    *,
    compiler: AssetCompiler | None = None,
) -> BundledAssets:
    """Bundle main entries, then partials, then sections into one CSS and one JS text."""
    root = Path(project_root).resolve()
    compiler = compiler or EsbuildCompiler()
    css_entries, js_entries = collect_asset_entries([*partials, *sections], root, options)

    with tempfile.TemporaryDirectory(prefix="bundled-components-") as tmp:
        temp_dir = Path(tmp)
        css = _bundle_css(css_entries, temp_dir, root, options, compiler)
        js = _bundle_js(js_entries, temp_dir, root, options, compiler)
    return BundledAssets(css=css, js=js)


def _bundle_css(
    entries: Sequence[Path],
    temp_dir: Path,
    project_root: Path,
    options: PluginOptions,
    compiler: AssetCompiler,
) -> Optional[str]:
    if not entries:
        return None
    try:
        contents = [entry.read_text(encoding="utf-8") for entry in entries]
        bundle_path = temp_dir / _CSS_BUNDLE_NAME
        bundle_path.write_text("\n\n".join(contents), encoding="utf-8")

        # @import statements in the main stylesheet resolve against its siblings.
        main_css = _main_entry(options.main_css_entry, project_root)
        if main_css is not None:
            _copy_import_files(main_css, temp_dir)

        if options.postcss.enabled:
            PostCSSProcessor(options.postcss.plugins, options.postcss.options).process(bundle_path)

        output = compiler.compile_css(bundle_path, cwd=temp_dir, minify=options.minify_output)
    except (OSError, UnicodeDecodeError, CompilationError) as exc:
        return _handle_failure("CSS", exc, options)
    return output or None


def _bundle_js(
    entries: Sequence[Path],
    temp_dir: Path,
    project_root: Path,
    options: PluginOptions,
    compiler: AssetCompiler,
) -> Optional[str]:
    if not entries:
        return None
    try:
        entry_path = temp_dir / _JS_ENTRY_NAME
        entry_path.write_text(_js_entry_content(entries, project_root, options), encoding="utf-8")
        output = compiler.compile_js(
            entry_path,
            cwd=project_root,
            minify=options.minify_output,
            target=options.target,
        )
    except (OSError, CompilationError) as exc:
        return _handle_failure("JS", exc, options)
    return output or None


def _js_entry_content(entries: Sequence[Path], project_root: Path, options: PluginOptions) -> str:
    main_js = _main_entry(options.main_js_entry, project_root)
    lines: List[str] = []
    index = 0
    for entry in entries:
        if entry == main_js:
            lines.append(f"// Main entry: {_relative(entry, project_root)}")
            lines.append(f"import {json.dumps(entry.as_posix())};")
            lines.append("")
            continue
        lines.append(f"// Component {index}: {_relative(entry, project_root)}")
        lines.append(f"import {json.dumps(entry.as_posix())};")
        index += 1
    return "\n".join(lines) + "\n"


def _copy_import_files(main_css: Path, temp_dir: Path) -> None:
    for sibling in main_css.parent.iterdir():
        if sibling.is_file() and sibling.suffix == ".css" and sibling.name != main_css.name:
            shutil.copy2(sibling, temp_dir / sibling.name)

    styles_dir = main_css.parent / "styles"
    if styles_dir.is_dir():
        target = temp_dir / "styles"
        target.mkdir(parents=True, exist_ok=True)
        for stylesheet in styles_dir.iterdir():
            if stylesheet.is_file() and stylesheet.suffix == ".css":
                shutil.copy2(stylesheet, target / stylesheet.name)


def _handle_failure(kind: str, exc: Exception, options: PluginOptions) -> None:
    message = f"Error bundling {kind}: {exc}"
    logger.error(message)
    if options.validation.strict:
        raise CompilationError(message) from exc
    return None


def _main_entry(entry: Optional[str], project_root: Path) -> Optional[Path]:
    if not entry:
        return None
    path = (project_root / entry).resolve()
    return path if path.is_file() else None


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = ["bundle_components", "collect_asset_entries"]
