from __future__ import annotations

from pathlib import Path

import pytest

from pandoc_spec.core.exceptions import ResourceCopyError
from pandoc_spec.core.options import merge_options
from pandoc_spec.core.resources import (
    ASSETS_DIR,
    STYLESHEET_ASSETS,
    TEMPLATE_ASSET,
    bundled_asset,
    copy_files,
    is_uri,
    resolve_path,
    resource_patterns,
)


def test_bundled_assets_exist() -> None:
    for name in (TEMPLATE_ASSET, "include-files.lua", "include-code-files.lua", *STYLESHEET_ASSETS):
        assert bundled_asset(name).is_file(), name
    assert bundled_asset(TEMPLATE_ASSET).parent == ASSETS_DIR


def test_template_mentions_toc_header() -> None:
    assert "$toc-header$" in bundled_asset(TEMPLATE_ASSET).read_text(encoding="utf-8")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("https://example.com/a.css", True),
        ("data:text/css,body{}", True),
        ("C:\\styles\\a.css", False),
        ("styles/a.css", False),
        ("a.css", False),
    ],
)
def test_is_uri(value: str, expected: bool) -> None:
    assert is_uri(value) is expected


def test_resolve_path(tmp_path: Path) -> None:
    assert resolve_path(None, tmp_path) is None
    assert resolve_path("a/b.txt", tmp_path) == (tmp_path / "a" / "b.txt").resolve()
    absolute = (tmp_path / "x.txt").resolve()
    assert resolve_path(str(absolute), Path("/elsewhere")) == absolute


def test_resource_patterns_for_html() -> None:
    options = merge_options(
        {
            "inputFiles": ["spec.md"],
            "outputFile": "index.html",
            "cssFiles": ["https://cdn.example.com/a.css", "local.css"],
            "resourceFiles": ["img/**/*.png"],
        },
        None,
    )

    assert resource_patterns(options) == [
        "local.css",
        str(bundled_asset("pandoc-spec.css")),
        "img/**/*.png",
    ]


def test_resource_patterns_skip_bundled_stylesheet_for_other_formats() -> None:
    options = merge_options(
        {"inputFiles": ["spec.md"], "outputFile": "spec.pdf", "outputFormat": "pdf"}, None
    )

    assert resource_patterns(options) == []


def test_copy_files_keeps_relative_layout(tmp_path: Path) -> None:
    source = tmp_path / "input"
    (source / "img" / "nested").mkdir(parents=True)
    (source / "img" / "a.png").write_bytes(b"a")
    (source / "img" / "nested" / "b.png").write_bytes(b"b")
    (source / "img" / "c.txt").write_text("c", encoding="utf-8")
    destination = tmp_path / "site"

    copied = copy_files(["img/**/*.png"], destination, base_directory=source)

    assert sorted(path.relative_to(destination.resolve()).as_posix() for path in copied) == [
        "img/a.png",
        "img/nested/b.png",
    ]
    assert not (destination / "img" / "c.txt").exists()


def test_copy_files_puts_absolute_matches_at_destination_root(tmp_path: Path) -> None:
    shared = tmp_path / "shared" / "theme.css"
    shared.parent.mkdir()
    shared.write_text("body {}", encoding="utf-8")
    destination = tmp_path / "site"

    copy_files([str(shared)], destination, base_directory=tmp_path / "input")

    assert (destination / "theme.css").read_text(encoding="utf-8") == "body {}"


def test_copy_files_ignores_missing_files(tmp_path: Path) -> None:
    assert copy_files(["missing.css"], tmp_path / "site", base_directory=tmp_path) == []


def test_copy_files_refuses_to_copy_onto_itself(tmp_path: Path) -> None:
    (tmp_path / "a.css").write_text("", encoding="utf-8")

    with pytest.raises(ResourceCopyError, match="cannot be copied to itself"):
        copy_files(["a.css"], tmp_path, base_directory=tmp_path)
