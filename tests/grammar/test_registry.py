"""
Tests for the grammar registry.

This module tests the built-in command table, construction of registries
from plain data and JSON, extension with new commands, and rejection of
malformed grammar configuration.
"""

import json

import pydantic
import pytest

from langcmd.grammar import GrammarRegistry, default_registry
from langcmd.grammar.domains import Enumerated, FreeText, ListOf, NumericRange, WeightedListOf
from langcmd.grammar.registry import CommandSchema
from langcmd.parsing import parse_script

BUILT_IN_COMMANDS = [
    "ANALYZE",
    "COMPARE",
    "SUMMARIZE",
    "EVALUATE",
    "REFINE",
    "CHAIN",
    "GENERATE",
    "EXPAND",
    "TRANSLATE",
    "SIMPLIFY",
    "STRUCTURE",
    "FORMAT",
    "OPTIMIZE",
    "CONNECT",
    "VISUALIZE",
    "VALIDATE",
    "DEBUG",
    "EXPLAIN",
    "SEARCH",
    "DESIGN",
]


class TestDefaultRegistry:
    """Tests for the built-in command table."""

    def test_contains_all_commands(self):
        """Test every built-in command is registered."""
        registry = default_registry()

        assert sorted(registry.names()) == sorted(BUILT_IN_COMMANDS)
        assert len(registry) == len(BUILT_IN_COMMANDS)

    def test_default_registry_is_cached(self):
        """Test repeated calls share one registry."""
        assert default_registry() is default_registry()

    def test_chain_schema(self):
        """Test CHAIN takes no input and no modifiers."""
        chain = default_registry().get("CHAIN")

        assert chain.requires_input is False
        assert dict(chain.modifiers) == {}
        assert chain.describe_keys() == "no modifiers"

    def test_slot_labels(self):
        """Test configured slot labels of commonly chained commands."""
        registry = default_registry()

        assert registry.get("SEARCH").label == "search results"
        assert registry.get("ANALYZE").label == "analysis"
        assert registry.get("SUMMARIZE").label == "summary"
        assert registry.get("COMPARE").label == "comparison"

    def test_domain_types(self):
        """Test domain specs are built into the matching ValueDomain."""
        registry = default_registry()

        assert isinstance(registry.get("ANALYZE").modifiers["focus"], Enumerated)
        assert isinstance(registry.get("COMPARE").modifiers["weight"], WeightedListOf)
        assert isinstance(registry.get("COMPARE").modifiers["criteria"], ListOf)
        assert isinstance(registry.get("SEARCH").modifiers["limit"], NumericRange)
        assert isinstance(registry.get("GENERATE").modifiers["audience"], FreeText)

    def test_lookup_is_case_sensitive(self):
        """Test command names only match exactly."""
        registry = default_registry()

        assert "ANALYZE" in registry
        assert "analyze" not in registry
        assert registry.has("ANALYZE")
        assert not registry.has("Analyze")

    def test_get_unknown_command(self):
        """Test get raises KeyError listing available commands."""
        with pytest.raises(KeyError) as exc_info:
            default_registry().get("BOGUS")

        assert "BOGUS" in str(exc_info.value)
        assert "ANALYZE" in str(exc_info.value)


class TestRegistryConstruction:
    """Tests for building registries from data."""

    def test_from_data(self):
        """Test a minimal custom grammar."""
        registry = GrammarRegistry.from_data({
            "PING": {"requires_input": False, "description": "Check liveness."},
            "ECHO": {"modifiers": {"Times": {"kind": "range", "min": 1, "max": 3}}},
        })

        assert registry.names() == ["PING", "ECHO"]
        assert registry.get("PING").requires_input is False
        assert registry.get("PING").description == "Check liveness."
        assert list(registry.get("ECHO").modifiers) == ["times"]
        assert registry.get("ECHO").label == "echo results"

    def test_from_json(self):
        """Test a grammar loaded from a JSON document."""
        document = json.dumps({
            "TAG": {
                "slot_label": "tags",
                "modifiers": {
                    "style": {"kind": "list", "item": {"kind": "enum", "choices": ["a", "b"]}}
                },
            }
        })
        registry = GrammarRegistry.from_json(document)

        domain = registry.get("TAG").modifiers["style"]
        assert isinstance(domain, ListOf)
        assert isinstance(domain.item, Enumerated)
        assert registry.get("TAG").label == "tags"

    def test_to_data_round_trip(self):
        """Test dumped data rebuilds an equivalent registry."""
        registry = GrammarRegistry.from_data({
            "ECHO": {"modifiers": {"times": {"kind": "range", "min": 1, "max": 3}}},
        })
        rebuilt = GrammarRegistry.from_data(registry.to_data())

        assert rebuilt.names() == registry.names()
        assert dict(rebuilt.get("ECHO").modifiers) == dict(registry.get("ECHO").modifiers)

    def test_hand_built_schemas(self):
        """Test a registry assembled directly from CommandSchema objects."""
        schema = CommandSchema("NOTE", modifiers={"tone": Enumerated(["dry"])})
        registry = GrammarRegistry({"NOTE": schema})

        assert registry.get("NOTE") is schema
        assert list(registry) == ["NOTE"]

    def test_hand_built_registry_dumps_data(self):
        """Test to_data derives plain data from directly constructed schemas."""
        schema = CommandSchema(
            "NOTE",
            modifiers={
                "tone": Enumerated(["dry", "bold"]),
                "tags": ListOf(FreeText()),
                "weight": WeightedListOf(["cost"]),
                "level": NumericRange(1, 5),
            },
            slot_label="note",
        )

        data = GrammarRegistry({"NOTE": schema}).to_data()

        assert data["NOTE"]["slot_label"] == "note"
        assert data["NOTE"]["modifiers"]["tone"] == {"kind": "enum", "choices": ["bold", "dry"]}
        assert data["NOTE"]["modifiers"]["tags"] == {"kind": "list", "item": {"kind": "free_text"}}
        rebuilt = GrammarRegistry.from_data(data).get("NOTE")
        assert dict(rebuilt.modifiers) == dict(schema.modifiers)

    def test_extended_registry_dumps_all_commands(self):
        extended = default_registry().extend({"PING": {"requires_input": False}})

        data = extended.to_data()

        assert list(data) == extended.names()
        assert data["PING"]["requires_input"] is False


class TestRegistryExtension:
    """Tests for extending a registry with new commands."""

    def test_extend_adds_command_without_mutating_original(self):
        """Test extend returns a new registry."""
        base = default_registry()
        extended = base.extend({
            "CRITIQUE": {
                "slot_label": "critique",
                "modifiers": {"tone": {"kind": "enum", "choices": ["gentle", "harsh"]}},
            }
        })

        assert "CRITIQUE" in extended
        assert "CRITIQUE" not in base
        assert len(extended) == len(base) + 1
        assert extended.get("ANALYZE") is base.get("ANALYZE")

    def test_extended_command_is_parseable(self):
        """Test a new command is usable in scripts without code changes."""
        registry = default_registry().extend({
            "CRITIQUE": {
                "slot_label": "critique",
                "modifiers": {"tone": {"kind": "enum", "choices": ["gentle", "harsh"]}},
            }
        })
        text = 'CHAIN:\n  SEARCH: "x"\n  CRITIQUE: search results --tone=harsh\n'

        chain = parse_script(text, registry).items[0]

        assert chain.steps[1].command_name == "CRITIQUE"
        assert chain.steps[1].slot_label == "critique"

    def test_extend_replaces_existing_command(self):
        """Test extending with an existing name overrides its schema."""
        registry = default_registry().extend({"SEARCH": {"modifiers": {}}})

        assert dict(registry.get("SEARCH").modifiers) == {}

    def test_extend_keeps_hand_built_schemas(self):
        """Test schemas not built from data survive extension."""
        base = GrammarRegistry({"NOTE": CommandSchema("NOTE")})
        extended = base.extend({"PING": {"requires_input": False}})

        assert extended.names() == ["NOTE", "PING"]


class TestMalformedGrammar:
    """Tests for grammar configuration errors."""

    def test_lowercase_command_name(self):
        with pytest.raises(pydantic.ValidationError):
            GrammarRegistry.from_data({"ping": {}})

    def test_unknown_domain_kind(self):
        with pytest.raises(pydantic.ValidationError):
            GrammarRegistry.from_data({"PING": {"modifiers": {"x": {"kind": "regex"}}}})

    def test_range_bounds_reversed(self):
        with pytest.raises(pydantic.ValidationError):
            GrammarRegistry.from_data(
                {"PING": {"modifiers": {"x": {"kind": "range", "min": 5, "max": 1}}}}
            )

    def test_empty_enum(self):
        with pytest.raises(pydantic.ValidationError):
            GrammarRegistry.from_data(
                {"PING": {"modifiers": {"x": {"kind": "enum", "choices": []}}}}
            )

    def test_unexpected_field(self):
        with pytest.raises(pydantic.ValidationError):
            GrammarRegistry.from_data({"PING": {"aliases": ["P"]}})

    def test_invalid_modifier_key(self):
        with pytest.raises(pydantic.ValidationError):
            GrammarRegistry.from_data({"PING": {"modifiers": {"9lives": {"kind": "free_text"}}}})
