"""Tests for build configuration resolution."""

from __future__ import annotations

import typing as typ
from pathlib import Path
from textwrap import dedent

import pytest

from pressroom.config import (
    BuildFlags,
    ConfigError,
    Entry,
    NoEntryError,
    find_package_metadata,
    load_config_file,
    normalize_entry,
    pick,
    resolve_build_config,
)

WriteFile = typ.Callable[[Path, str, str], Path]


def test_pick_prefers_first_non_none_candidate() -> None:
    assert pick(None, "config", "package") == "config"
    assert pick(False, True, default=True) is False, "explicit False must win"
    assert pick(None, None, default=3000) == 3000


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("intro.md", Entry(path="intro.md")),
        ({"path": "a.md", "title": "A"}, Entry(path="a.md", title="A")),
        (
            {"path": "b.html", "theme": "print.css"},
            Entry(path="b.html", theme="print.css"),
        ),
        (Entry(path="c.md"), Entry(path="c.md")),
    ],
)
def test_normalize_entry_accepts_supported_shapes(
    value: object, expected: Entry
) -> None:
    assert normalize_entry(value) == expected


@pytest.mark.parametrize("value", [42, {"title": "No path"}, ["a.md"]])
def test_normalize_entry_rejects_malformed_values(value: object) -> None:
    with pytest.raises(ConfigError):
        normalize_entry(value)


def test_missing_explicit_config_is_an_error(project_dir: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config_file(project_dir / "missing.yaml", explicit=True)


def test_missing_implicit_config_means_no_config(project_dir: Path) -> None:
    assert load_config_file(project_dir / "pressroom.yaml") is None


def test_non_mapping_config_is_rejected(
    project_dir: Path, write_file: WriteFile
) -> None:
    path = write_file(project_dir, "pressroom.yaml", "- intro.md\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config_file(path)


def test_no_entries_raises_no_entry_error(project_dir: Path) -> None:
    with pytest.raises(NoEntryError):
        resolve_build_config(BuildFlags(), cwd=project_dir)


def test_cli_input_replaces_config_entries(
    project_dir: Path, write_file: WriteFile
) -> None:
    write_file(
        project_dir,
        "pressroom.yaml",
        "entry:\n  - one.md\n  - path: two.md\n    title: Two\n",
    )

    _, entries = resolve_build_config(BuildFlags(input="only.md"), cwd=project_dir)

    assert entries == [Entry(path="only.md")]


def test_config_entries_keep_their_order(
    project_dir: Path, write_file: WriteFile
) -> None:
    write_file(
        project_dir,
        "pressroom.yaml",
        "entry:\n  - one.md\n  - path: two.md\n    title: Two\n  - three.html\n",
    )

    _, entries = resolve_build_config(BuildFlags(), cwd=project_dir)

    assert [entry.path for entry in entries] == ["one.md", "two.md", "three.html"]
    assert entries[1].title == "Two"


def test_flags_override_config_which_overrides_package(
    project_dir: Path, write_file: WriteFile
) -> None:
    write_file(
        project_dir,
        "package.json",
        '{"name": "field-notes", "author": {"name": "Pkg Author"}}',
    )
    write_file(
        project_dir,
        "pressroom.yaml",
        dedent(
            """\
            entry: intro.md
            title: Config Title
            size: A5
            timeout: 9000
            press_ready: true
            """
        ),
    )

    config, _ = resolve_build_config(
        BuildFlags(size="A4", press_ready=False), cwd=project_dir
    )

    assert config.title == "Config Title"
    assert config.author == "Pkg Author", "author falls back to package.json"
    assert config.size == "A4"
    assert config.press_ready is False
    assert config.timeout == 9000


def test_defaults_apply_without_config(project_dir: Path) -> None:
    config, _ = resolve_build_config(BuildFlags(input="intro.md"), cwd=project_dir)

    assert config.out_dir == project_dir.resolve() / ".pressroom"
    assert config.out_file == project_dir.resolve() / "output.pdf"
    assert config.language == "en"
    assert config.toc is True
    assert config.timeout == 3000
    assert config.load_mode == "book"
    assert config.sandbox is True
    assert config.artifacts_dir == config.out_dir / "artifacts"


def test_config_paths_resolve_against_config_directory(
    tmp_path: Path, write_file: WriteFile
) -> None:
    config_dir = tmp_path / "project"
    write_file(
        config_dir,
        "conf/pressroom.yaml",
        "entry: intro.md\nout_dir: ../build\nentry_context: ../src\ntoc: contents.html\n",
    )

    config, _ = resolve_build_config(
        BuildFlags(config_path=Path("conf/pressroom.yaml")), cwd=config_dir
    )

    assert config.out_dir == (config_dir / "build").resolve()
    assert config.context_dir == (config_dir / "src").resolve()
    assert config.toc == (config_dir / "src" / "contents.html").resolve()


def test_out_file_directory_gets_default_name(project_dir: Path) -> None:
    (project_dir / "dist").mkdir()

    config, _ = resolve_build_config(
        BuildFlags(input="intro.md", out_file=Path("dist")), cwd=project_dir
    )

    assert config.out_file == project_dir.resolve() / "dist" / "output.pdf"


def test_unknown_load_mode_is_rejected(project_dir: Path) -> None:
    with pytest.raises(ConfigError, match="load mode"):
        resolve_build_config(
            BuildFlags(input="intro.md", load_mode="scroll"), cwd=project_dir
        )


def test_invalid_timeout_type_is_rejected(
    project_dir: Path, write_file: WriteFile
) -> None:
    write_file(project_dir, "pressroom.yaml", "entry: a.md\ntimeout: soon\n")
    with pytest.raises(ConfigError, match="timeout"):
        resolve_build_config(BuildFlags(), cwd=project_dir)


def test_pyproject_authors_are_joined(
    project_dir: Path, write_file: WriteFile
) -> None:
    write_file(
        project_dir,
        "pyproject.toml",
        dedent(
            """\
            [project]
            name = "notes"
            authors = [{name = "Ada"}, {name = "Grace"}]
            """
        ),
    )

    metadata = find_package_metadata(project_dir)

    assert metadata is not None
    assert metadata.name == "notes"
    assert metadata.author == "Ada, Grace"
