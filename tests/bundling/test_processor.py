"""Tests for asset collection and bundling."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import pytest

from bundled_components.bundling import CompilationError, bundle_components, collect_asset_entries
from bundled_components.config import normalize_options
from bundled_components.models import Component
from tests._fixtures.site_builder import SiteBuilder


class _RecordingCompiler:
    """Echoes entry contents so tests can inspect what would be bundled."""

    def __init__(self, *, fail_css: bool = False, fail_js: bool = False) -> None:
        self.fail_css = fail_css
        self.fail_js = fail_js
        self.css_calls: List[Tuple[Path, Path, bool]] = []
        self.js_calls: List[Tuple[Path, Path, bool, str]] = []
        self.css_siblings: List[str] = []

    def compile_css(self, entry: Path, *, cwd: Path, minify: bool) -> str:
        self.css_calls.append((entry, cwd, minify))
        self.css_siblings = sorted(
            path.relative_to(cwd).as_posix() for path in cwd.rglob("*.css") if path != entry
        )
        if self.fail_css:
            raise CompilationError("esbuild failed: unexpected token")
        return entry.read_text(encoding="utf-8")

    def compile_js(self, entry: Path, *, cwd: Path, minify: bool, target: str) -> str:
        self.js_calls.append((entry, cwd, minify, target))
        if self.fail_js:
            raise CompilationError("esbuild failed: unexpected token")
        return entry.read_text(encoding="utf-8")


def _site(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "src/assets/main.css": '@import "variables.css";\nbody { margin: 0; }\n',
            "src/assets/variables.css": ":root { --gap: 1rem; }\n",
            "src/assets/styles/type.css": "h1 { font-size: 2rem; }\n",
            "src/assets/main.js": "console.log('main');\n",
        }
    )
    site_builder.component("button", css=".button {}", js="export const button = 1;")
    site_builder.component("hero", kind="section", css=".hero {}")


def _components(site_builder: SiteBuilder) -> Tuple[List[Component], List[Component]]:
    partial_dir = site_builder.path("src/_includes/components/_partials/button")
    section_dir = site_builder.path("src/_includes/components/sections/hero")
    partials = [Component(name="button", path=partial_dir, styles=["button.css"], scripts=["button.js"])]
    sections = [Component(name="hero", path=section_dir, styles=["hero.css", "missing.css"])]
    return partials, sections


def test_collect_asset_entries_orders_main_first_and_skips_missing(site_builder: SiteBuilder) -> None:
    _site(site_builder)
    partials, sections = _components(site_builder)

    css, js = collect_asset_entries([*partials, *sections], site_builder.path(), normalize_options())

    root = site_builder.path().resolve()
    assert [path.relative_to(root).as_posix() for path in css] == [
        "src/assets/main.css",
        "src/_includes/components/_partials/button/button.css",
        "src/_includes/components/sections/hero/hero.css",
    ]
    assert [path.relative_to(root).as_posix() for path in js] == [
        "src/assets/main.js",
        "src/_includes/components/_partials/button/button.js",
    ]


def test_shared_files_are_included_once(site_builder: SiteBuilder) -> None:
    site_builder.write({"shared/shared.css": ".shared {}\n"})
    shared_dir = site_builder.path("shared")
    components = [
        Component(name="a", path=shared_dir, styles=["shared.css"]),
        Component(name="b", path=shared_dir, styles=["shared.css", "./shared.css"]),
    ]
    options = normalize_options({"mainCSSEntry": None, "mainJSEntry": None})

    css, js = collect_asset_entries(components, site_builder.path(), options)

    assert css == [(shared_dir / "shared.css").resolve()]
    assert js == []


def test_bundle_components_concatenates_css_and_builds_js_entry(site_builder: SiteBuilder) -> None:
    _site(site_builder)
    partials, sections = _components(site_builder)
    compiler = _RecordingCompiler()
    options = normalize_options({"minifyOutput": True})

    assets = bundle_components(partials, sections, site_builder.path(), options, compiler=compiler)

    assert assets.css is not None
    assert assets.css.index("body { margin: 0; }") < assets.css.index(".button {}") < assets.css.index(".hero {}")
    assert compiler.css_siblings == ["styles/type.css", "variables.css"]
    assert compiler.css_calls[0][2] is True

    assert assets.js is not None
    lines = [line for line in assets.js.splitlines() if line.startswith("import ")]
    assert lines[0].endswith('src/assets/main.js";')
    assert lines[1].endswith('button/button.js";')
    entry, cwd, minify, target = compiler.js_calls[0]
    assert cwd == site_builder.path().resolve()
    assert minify is True
    assert target == "es2020"


def test_kinds_without_entries_yield_none(site_builder: SiteBuilder) -> None:
    site_builder.component("hero", kind="section", css=".hero {}")
    hero = Component(
        name="hero",
        path=site_builder.path("src/_includes/components/sections/hero"),
        styles=["hero.css"],
    )
    compiler = _RecordingCompiler()

    assets = bundle_components([], [hero], site_builder.path(), normalize_options(), compiler=compiler)

    assert assets.css == ".hero {}"
    assert assets.js is None
    assert compiler.js_calls == []


def test_failures_are_independent_when_not_strict(site_builder: SiteBuilder) -> None:
    _site(site_builder)
    partials, sections = _components(site_builder)

    assets = bundle_components(
        partials,
        sections,
        site_builder.path(),
        normalize_options(),
        compiler=_RecordingCompiler(fail_css=True),
    )

    assert assets.css is None
    assert assets.js is not None


def test_failures_raise_when_strict(site_builder: SiteBuilder) -> None:
    _site(site_builder)
    partials, sections = _components(site_builder)
    options = normalize_options({"validation": {"strict": True}})

    with pytest.raises(CompilationError, match="Error bundling JS"):
        bundle_components(
            partials,
            sections,
            site_builder.path(),
            options,
            compiler=_RecordingCompiler(fail_js=True),
        )
