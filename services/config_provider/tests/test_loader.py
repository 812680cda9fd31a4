from __future__ import annotations

import pytest

from services.config_provider.app.provider import ConfigLoadError, load_bundle
from services.config_provider.app.provider.models import DEFAULT_BUNDLE_VERSION


def test_merges_yaml_and_json_fragments_recursively(tmp_path, write_fragment):
    write_fragment(
        tmp_path,
        "a_routes.yaml",
        {"routes": [{"name": "api", "path": "/api"}], "metadata": {"team": "core", "owner": "alice"}},
    )
    write_fragment(
        tmp_path,
        "nested/b_middlewares.json",
        {
            "middlewares": [{"name": "limit", "type": "rateLimit", "rule": {"unit": "minute", "requestsPerUnit": 60}}],
            "metadata": {"owner": "bob"},
        },
    )
    write_fragment(tmp_path, "nested/deeper/c_routes.yml", {"routes": [{"name": "api", "path": "/v2"}]})

    bundle = load_bundle(str(tmp_path))

    assert bundle.version == DEFAULT_BUNDLE_VERSION
    # same-named routes are kept, in traversal order
    assert [r["path"] for r in bundle.routes] == ["/api", "/v2"]
    assert bundle.middlewares[0]["rule"] == {"unit": "minute", "requestsPerUnit": 60}
    assert bundle.metadata == {"team": "core", "owner": "bob"}
    assert bundle.fingerprint == ""


def test_unrecognized_files_are_skipped(tmp_path, write_fragment):
    write_fragment(tmp_path, "routes.yaml", {"routes": [{"name": "a"}]})
    (tmp_path / "README.md").write_text("not: [a fragment", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("{", encoding="utf-8")

    bundle = load_bundle(str(tmp_path))

    assert len(bundle.routes) == 1


def test_extension_match_is_case_insensitive(tmp_path, write_fragment):
    write_fragment(tmp_path, "routes.YAML", {"routes": [{"name": "upper"}]})

    bundle = load_bundle(str(tmp_path))

    assert bundle.routes == ({"name": "upper"},)


def test_empty_fragment_contributes_nothing(tmp_path, write_fragment):
    (tmp_path / "empty.yaml").write_text("", encoding="utf-8")

    bundle = load_bundle(str(tmp_path))

    assert bundle.routes == ()
    assert bundle.middlewares == ()
    assert bundle.metadata == {}


def test_fragment_version_and_metadata_values_are_strings(tmp_path, write_fragment):
    write_fragment(tmp_path, "a.yaml", {"version": 2, "metadata": {"replicas": 3, "canary": True}})

    bundle = load_bundle(str(tmp_path))

    assert bundle.version == "2"
    assert bundle.metadata == {"replicas": "3", "canary": "true"}


def test_yaml_metadata_scalars_keep_their_written_form(tmp_path):
    (tmp_path / "a.yaml").write_text(
        "version: 1.10\n"
        "metadata:\n"
        "  canary: true\n"
        "  legacy: no\n"
        "  release: 1.10\n"
        "  budget: 1e3\n"
        "  day: 2024-05-01\n"
        "routes:\n"
        "  - name: r\n"
        "    weight: 1.5\n",
        encoding="utf-8",
    )

    bundle = load_bundle(str(tmp_path))

    assert bundle.version == "1.10"
    assert bundle.metadata == {
        "canary": "true",
        "legacy": "no",
        "release": "1.10",
        "budget": "1e3",
        "day": "2024-05-01",
    }
    # payload values keep their parsed types
    assert bundle.routes == ({"name": "r", "weight": 1.5},)


def test_json_metadata_numbers_keep_their_written_form(tmp_path):
    (tmp_path / "a.json").write_text(
        '{"metadata": {"canary": false, "release": 1.10}, "middlewares": [{"retries": 3}]}',
        encoding="utf-8",
    )

    bundle = load_bundle(str(tmp_path))

    assert bundle.metadata == {"canary": "false", "release": "1.10"}
    assert bundle.middlewares == ({"retries": 3},)


def test_malformed_yaml_aborts_whole_directory(tmp_path, write_fragment):
    write_fragment(tmp_path, "a_good.yaml", {"routes": [{"name": "ok"}]})
    bad = tmp_path / "b_bad.yaml"
    bad.write_text("routes: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigLoadError) as excinfo:
        load_bundle(str(tmp_path))

    assert excinfo.value.path == str(bad)


def test_malformed_json_aborts_whole_directory(tmp_path, write_fragment):
    (tmp_path / "bad.json").write_text('{"routes": [', encoding="utf-8")

    with pytest.raises(ConfigLoadError, match="JSON"):
        load_bundle(str(tmp_path))


@pytest.mark.parametrize(
    "document",
    [
        ["not", "a", "mapping"],
        {"routes": {"name": "not-a-list"}},
        {"middlewares": "nope"},
        {"routes": {}},
        {"routes": ""},
        {"routes": 0},
        {"middlewares": False},
        {"metadata": ""},
        {"metadata": ["env", "prod"]},
    ],
)
def test_wrong_document_shape_is_a_load_error(tmp_path, write_fragment, document):
    write_fragment(tmp_path, "shape.yaml", document)

    with pytest.raises(ConfigLoadError):
        load_bundle(str(tmp_path))


def test_missing_directory_is_a_load_error(tmp_path, write_fragment):
    with pytest.raises(ConfigLoadError, match="does not exist"):
        load_bundle(str(tmp_path / "missing"))
