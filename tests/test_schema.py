# SPDX-License-Identifier: MIT
"""Tests for the manifest schema module."""

from jsonschema import Draft202012Validator

from flatpak_manifest.schema import (
    APPLICATION_SCHEMA,
    BUILD_SYSTEMS,
    DEFAULT_BUILDSYSTEM,
    FRAGMENT_SCHEMA,
    SOURCE_SCHEMAS,
    SOURCE_TYPES,
    SOURCES_SCHEMA,
    get_application_schema,
    get_default_values,
    get_fragment_schema,
    get_sources_schema,
)


def _errors(schema: dict, instance) -> list:
    return list(Draft202012Validator(schema).iter_errors(instance))


MINIMAL = {
    "app-id": "net.example.App",
    "runtime": "org.freedesktop.Platform",
    "runtime-version": "23.08",
    "sdk": "org.freedesktop.Sdk",
    "modules": [],
}


class TestSchemaStructure:
    """Tests for the schema definitions themselves."""

    def test_schemas_are_valid_draft_2020_12(self):
        """Every schema is a valid JSON Schema document."""
        Draft202012Validator.check_schema(APPLICATION_SCHEMA)
        Draft202012Validator.check_schema(FRAGMENT_SCHEMA)
        Draft202012Validator.check_schema(SOURCES_SCHEMA)

    def test_every_source_type_has_a_schema(self):
        """Each source kind has its own closed schema."""
        assert set(SOURCE_SCHEMAS) == set(SOURCE_TYPES)
        for kind, schema in SOURCE_SCHEMAS.items():
            assert schema["additionalProperties"] is False
            assert schema["properties"]["type"] == {"const": kind}

    def test_default_buildsystem_is_known(self):
        """The default build system is one of the accepted ones."""
        assert DEFAULT_BUILDSYSTEM in BUILD_SYSTEMS

    def test_get_schema_returns_copy(self):
        """Mutating a returned schema does not affect later calls."""
        schema = get_application_schema()
        schema["required"].append("extra")
        assert "extra" not in get_application_schema()["required"]

        fragment = get_fragment_schema()
        fragment["$defs"].clear()
        assert get_fragment_schema()["$defs"]

        sources = get_sources_schema()
        sources["$defs"].clear()
        assert get_sources_schema()["$defs"]


class TestDefaults:
    """Tests for default values declared in the schema."""

    def test_application_defaults(self):
        """Optional application fields default to empty values."""
        defaults = get_default_values()["application"]
        assert defaults["tags"] == []
        assert defaults["command"] is None
        assert defaults["finish-args"] == []
        assert defaults["branch"] == ""

    def test_module_defaults(self):
        """Optional module fields default to empty values."""
        defaults = get_default_values()["module"]
        assert defaults["buildsystem"] == "autotools"
        assert defaults["config-opts"] == []
        assert defaults["cleanup"] == []
        assert defaults["disabled"] is False
        assert "name" not in defaults

    def test_defaults_are_copies(self):
        """Mutating returned defaults does not affect later calls."""
        defaults = get_default_values()
        defaults["application"]["tags"].append("x")
        assert get_default_values()["application"]["tags"] == []


class TestApplicationSchema:
    """Tests for validation against the application schema."""

    def test_minimal_manifest_is_valid(self):
        """Identifier, runtime, runtime-version, sdk and modules suffice."""
        assert _errors(APPLICATION_SCHEMA, MINIMAL) == []

    def test_id_alias_is_valid(self):
        """The identifier may be given as id instead of app-id."""
        manifest = {key: value for key, value in MINIMAL.items() if key != "app-id"}
        manifest["id"] = "net.example.App"
        assert _errors(APPLICATION_SCHEMA, manifest) == []

    def test_both_identifier_keys_invalid(self):
        """app-id and id cannot both be present."""
        manifest = {**MINIMAL, "id": "net.example.App"}
        errors = _errors(APPLICATION_SCHEMA, manifest)
        assert [e.validator for e in errors] == ["not"]

    def test_module_items_are_strings_or_modules(self):
        """Module items are either references or module objects."""
        manifest = {**MINIMAL, "modules": ["shared/lib.json", {"name": "core"}]}
        assert _errors(APPLICATION_SCHEMA, manifest) == []

    def test_source_items_are_strings_or_sources(self):
        """Source items are either references to sources files or source objects."""
        module = {"name": "core", "sources": ["cargo-sources.json", {"type": "dir", "path": "."}]}
        assert _errors(APPLICATION_SCHEMA, {**MINIMAL, "modules": [module]}) == []

    def test_app_name_allowed(self):
        """app-name is a recognised top-level key."""
        assert _errors(APPLICATION_SCHEMA, {**MINIMAL, "app-name": "Example"}) == []

    def test_module_item_of_other_type_invalid(self):
        """Numbers are neither references nor modules."""
        manifest = {**MINIMAL, "modules": [42]}
        errors = _errors(APPLICATION_SCHEMA, manifest)
        assert len(errors) == 1
        assert errors[0].validator == "type"

    def test_unknown_source_type_invalid(self):
        """The type discriminator must name a known kind."""
        manifest = {**MINIMAL, "modules": [{"name": "core", "sources": [{"type": "hg"}]}]}
        errors = _errors(APPLICATION_SCHEMA, manifest)
        assert [e.validator for e in errors] == ["enum"]

    def test_source_fields_checked_per_kind(self):
        """Keys of one kind are rejected on another."""
        source = {"type": "git", "url": "https://example.com/r.git", "tag": "v1", "sha256": "a"}
        manifest = {**MINIMAL, "modules": [{"name": "core", "sources": [source]}]}
        errors = _errors(APPLICATION_SCHEMA, manifest)
        assert [e.validator for e in errors] == ["additionalProperties"]


class TestFragmentSchema:
    """Tests for validation against the fragment schema."""

    def test_single_module(self):
        """A fragment may hold one module object."""
        assert _errors(FRAGMENT_SCHEMA, {"name": "lib", "buildsystem": "simple"}) == []

    def test_module_list(self):
        """A fragment may hold a list of module items."""
        assert _errors(FRAGMENT_SCHEMA, [{"name": "lib"}, "other.json"]) == []

    def test_module_without_name(self):
        """A module object requires a name."""
        errors = _errors(FRAGMENT_SCHEMA, {"buildsystem": "simple"})
        assert [e.validator for e in errors] == ["required"]


class TestSourcesSchema:
    """Tests for validation against the sources file schema."""

    def test_single_source(self):
        """A sources file may hold one source object."""
        assert _errors(SOURCES_SCHEMA, {"type": "shell", "commands": ["true"]}) == []

    def test_source_list(self):
        """A sources file may hold a list of source objects."""
        sources = [{"type": "shell", "commands": ["true"]}, {"type": "dir", "path": "src"}]
        assert _errors(SOURCES_SCHEMA, sources) == []

    def test_reference_invalid(self):
        """Sources files cannot reference other sources files."""
        errors = _errors(SOURCES_SCHEMA, ["other.json"])
        assert [e.validator for e in errors] == ["type"]
