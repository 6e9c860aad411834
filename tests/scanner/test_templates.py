"""Tests for template usage scanning."""

from __future__ import annotations

from pathlib import Path

import pytest

from bundled_components.scanner import (
    FrontMatterError,
    JinjaReferenceExtractor,
    RegexReferenceExtractor,
    detect_used_components,
    extract_component_name,
    get_extractor,
    parse_template_file,
    scan_layout_files,
    scan_templates,
    section_types,
    split_front_matter,
)
from tests._fixtures.site_builder import SiteBuilder

MARKERS = ["_partials", "sections"]


@pytest.mark.parametrize(
    "template_path, expected",
    [
        ("components/_partials/button/button.njk", "button"),
        ("components/sections/hero/hero.njk", "hero"),
        ("_partials/card.njk", "card.njk"),
        ("components/_partials", None),
        ("layouts/base.njk", None),
    ],
)
def test_extract_component_name(template_path: str, expected: str | None) -> None:
    assert extract_component_name(template_path, MARKERS) == expected


def test_parse_template_file_handles_import_forms() -> None:
    content = """
    {% from "components/_partials/button/button.njk" import button %}
    {%- from 'components/_partials/icon/icon.njk' import icon %}
    {%from "components/_partials/badge/badge.njk" import badge%}
    {% include "components/sections/header/header.njk" %}
    {%- include 'components/sections/footer/footer.njk' -%}
    {% include "partials/analytics.njk" %}
    """

    assert parse_template_file(content, MARKERS) == {"button", "icon", "badge", "header", "footer"}


def test_split_front_matter_returns_mapping_and_body() -> None:
    front_matter, body = split_front_matter("---\ntitle: Home\n---\n<h1>Hi</h1>\n")

    assert front_matter == {"title": "Home"}
    assert body == "<h1>Hi</h1>\n"


def test_split_front_matter_without_block() -> None:
    assert split_front_matter("<p>plain</p>") == ({}, "<p>plain</p>")


def test_split_front_matter_rejects_invalid_yaml() -> None:
    with pytest.raises(FrontMatterError):
        split_front_matter("---\nsections: [unclosed\n---\nbody")


def test_section_types_ignore_malformed_entries() -> None:
    front_matter = {
        "sections": [
            {"sectionType": "hero"},
            {"sectionType": ""},
            {"title": "no type"},
            "not-a-mapping",
            {"sectionType": "hero"},
            {"sectionType": "cta"},
        ]
    }

    assert section_types(front_matter) == {"hero", "cta"}


def test_scan_templates_unions_front_matter_markup_and_layouts(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "src/index.md": """
            ---
            sections:
              - sectionType: hero
                heading: Welcome
            ---
            {% from "components/_partials/button/button.njk" import button %}
            """,
            "src/about.html": """
            {% include "components/sections/team/team.njk" %}
            """,
            "src/notes.txt": """
            {% include "components/sections/ignored/ignored.njk" %}
            """,
            "src/_includes/layouts/base.njk": """
            {% include "components/sections/footer/footer.njk" %}
            """,
            "src/node_modules/pkg/readme.md": """
            {% include "components/sections/vendor/vendor.njk" %}
            """,
        }
    )

    scan = scan_templates(
        site_builder.path("src"),
        site_builder.path("src/_includes/layouts"),
        MARKERS,
    )

    assert scan.used == {"hero", "button", "team", "footer"}
    assert list(scan.sections) == ["index.md"]
    assert scan.sections["index.md"][0]["sectionType"] == "hero"
    assert scan.errors == []


def test_scan_templates_skips_files_with_bad_front_matter(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "src/bad.md": """
            ---
            sections: [unclosed
            ---
            {% include "components/sections/hidden/hidden.njk" %}
            """,
            "src/good.md": """
            {% include "components/sections/visible/visible.njk" %}
            """,
        }
    )

    scan = scan_templates(site_builder.path("src"), None, MARKERS)

    assert scan.used == {"visible"}
    assert scan.errors == ["bad.md"]


def test_scan_templates_missing_input_directory(tmp_path: Path) -> None:
    scan = scan_templates(tmp_path / "missing", tmp_path / "layouts", MARKERS)

    assert scan.used == set()
    assert scan.sections == {}


def test_detect_used_components_returns_names(site_builder: SiteBuilder) -> None:
    site_builder.write({"src/page.njk": '{% include "components/_partials/nav/nav.njk" %}\n'})

    assert detect_used_components(site_builder.path("src"), None, MARKERS) == {"nav"}


def test_scan_layout_files_only_reads_layout_extensions(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "layouts/base.njk": '{% include "components/sections/header/header.njk" %}\n',
            "layouts/nested/post.njk": '{% from "components/_partials/tag/tag.njk" import tag %}\n',
            "layouts/readme.md": '{% include "components/sections/skip/skip.njk" %}\n',
        }
    )
    (site_builder.path("layouts") / "binary.njk").write_bytes(b"\xff\xfe\x00bad")

    assert scan_layout_files(site_builder.path("layouts"), MARKERS) == {"header", "tag"}


def test_custom_extension_list_is_respected(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "src/page.liquid": '{% include "components/sections/hero/hero.njk" %}\n',
            "src/page.njk": '{% include "components/sections/cta/cta.njk" %}\n',
        }
    )

    scan = scan_templates(site_builder.path("src"), None, MARKERS, extensions=[".liquid"])

    assert scan.used == {"hero"}


def test_jinja_extractor_matches_regex_on_plain_templates() -> None:
    content = (
        '{% from "components/_partials/button/button.njk" import button %}\n'
        '{% include "components/sections/header/header.njk" %}\n'
    )

    jinja = parse_template_file(content, MARKERS, JinjaReferenceExtractor())
    regex = parse_template_file(content, MARKERS, RegexReferenceExtractor())

    assert jinja == regex == {"button", "header"}


def test_jinja_extractor_falls_back_on_unknown_tags() -> None:
    content = (
        '{% shortcode "image" %}\n'
        '{% include "components/sections/header/header.njk" %}\n'
    )

    assert parse_template_file(content, MARKERS, JinjaReferenceExtractor()) == {"header"}


def test_get_extractor_by_name() -> None:
    assert isinstance(get_extractor(), RegexReferenceExtractor)
    assert isinstance(get_extractor("Jinja"), JinjaReferenceExtractor)
    with pytest.raises(ValueError):
        get_extractor("mustache")


def test_impossible_front_matter_date_only_skips_that_file(site_builder: SiteBuilder) -> None:
    site_builder.write(
        {
            "src/post.md": """
            ---
            date: 2024-13-45
            sections:
              - sectionType: hidden
            ---
            Post
            """,
            "src/good.njk": '{% include "components/sections/hero/hero.njk" %}\n',
        }
    )

    scan = scan_templates(site_builder.path("src"), None, MARKERS)

    assert scan.used == {"hero"}
    assert scan.errors == ["post.md"]


def test_split_front_matter_wraps_date_errors() -> None:
    with pytest.raises(FrontMatterError):
        split_front_matter("---\ndate: 2024-13-45\n---\nbody")


def test_jinja_extractor_ignores_extends_and_import_as() -> None:
    content = (
        '{% extends "components/sections/page/page.njk" %}\n'
        '{% import "components/_partials/macros/macros.njk" as macros %}\n'
        '{% from "components/_partials/button/button.njk" import button %}\n'
        '{% block body %}{% include "components/sections/header/header.njk" %}{% endblock %}\n'
    )

    jinja = parse_template_file(content, MARKERS, JinjaReferenceExtractor())
    regex = parse_template_file(content, MARKERS, RegexReferenceExtractor())

    assert jinja == regex == {"button", "header"}
