"""
Grammar registry: command names mapped to their schemas.

The registry is built from plain data (a mapping or JSON document) validated
with pydantic, so adding a command or a modifier is a configuration change.
Once constructed a registry is read-only; ``extend`` returns a new one.
"""

import re
from collections.abc import Iterator, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Annotated, Any, Literal, Union

from attrs import field, frozen
from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator

from langcmd.core.values import normalize_modifier_key
from langcmd.grammar.domains import (
    Enumerated,
    FreeText,
    ListOf,
    NumericRange,
    ValueDomain,
    WeightedListOf,
)

COMMAND_NAME_PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*$")
MODIFIER_KEY_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")


class FreeTextSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["free_text"] = "free_text"


class EnumSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["enum"] = "enum"
    choices: list[str] = Field(min_length=1)


class RangeSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["range"] = "range"
    min: float
    max: float

    @model_validator(mode="after")
    def _check_bounds(self) -> "RangeSpec":
        if self.min > self.max:
            raise ValueError(f"range minimum {self.min} exceeds maximum {self.max}")
        return self


class ListSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["list"] = "list"
    item: "DomainSpec"


class WeightedSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["weighted"] = "weighted"
    keys: list[str] = Field(min_length=1)


DomainSpec = Annotated[
    Union[FreeTextSpec, EnumSpec, RangeSpec, ListSpec, WeightedSpec],
    Field(discriminator="kind"),
]

ListSpec.model_rebuild()


class CommandSpec(BaseModel):
    """Data form of a command schema as it appears in grammar configuration."""

    model_config = ConfigDict(extra="forbid")

    requires_input: bool = True
    slot_label: str | None = None
    description: str = ""
    modifiers: dict[str, DomainSpec] = Field(default_factory=dict)

    @field_validator("modifiers")
    @classmethod
    def _normalize_keys(cls, modifiers: dict[str, Any]) -> dict[str, Any]:
        normalized = {}
        for key, spec in modifiers.items():
            clean = normalize_modifier_key(key)
            if not MODIFIER_KEY_PATTERN.match(clean):
                raise ValueError(f"Invalid modifier key: {key}")
            normalized[clean] = spec
        return normalized


class GrammarSpec(RootModel[dict[str, CommandSpec]]):
    """Complete grammar configuration: command name -> CommandSpec."""

    @field_validator("root")
    @classmethod
    def _check_names(cls, commands: dict[str, CommandSpec]) -> dict[str, CommandSpec]:
        for name in commands:
            if not COMMAND_NAME_PATTERN.match(name):
                raise ValueError(
                    f"Invalid command name: {name}. Command names are uppercase identifiers"
                )
        return commands


def build_domain(spec: FreeTextSpec | EnumSpec | RangeSpec | ListSpec | WeightedSpec) -> ValueDomain:
    """Convert a validated domain spec into a ValueDomain."""
    if isinstance(spec, EnumSpec):
        return Enumerated(spec.choices)
    if isinstance(spec, RangeSpec):
        return NumericRange(spec.min, spec.max)
    if isinstance(spec, ListSpec):
        return ListOf(build_domain(spec.item))
    if isinstance(spec, WeightedSpec):
        return WeightedListOf(spec.keys)
    return FreeText()


def domain_spec(domain: ValueDomain) -> FreeTextSpec | EnumSpec | RangeSpec | ListSpec | WeightedSpec:
    """Inverse of build_domain. Choice and key sets are dumped sorted."""
    if isinstance(domain, Enumerated):
        return EnumSpec(choices=sorted(domain.choices))
    if isinstance(domain, NumericRange):
        return RangeSpec(min=domain.minimum, max=domain.maximum)
    if isinstance(domain, ListOf):
        return ListSpec(item=domain_spec(domain.item))
    if isinstance(domain, WeightedListOf):
        return WeightedSpec(keys=sorted(domain.keys))
    if isinstance(domain, FreeText):
        return FreeTextSpec()
    raise TypeError(f"No data form for value domain {type(domain).__name__}")


def _freeze_domains(modifiers: Mapping[str, ValueDomain]) -> Mapping[str, ValueDomain]:
    return MappingProxyType(dict(modifiers))


@frozen
class CommandSchema:
    """
    Schema of one command.

    Params:
        name: Command name (uppercase, case-sensitive)
        requires_input: Whether an input must follow the header
        modifiers: Recognized modifier keys mapped to their value domains
        slot_label: Custom chain slot label; defaults to '<name> results'
        description: One-line description used when prompting a model
    """

    name: str
    requires_input: bool = True
    modifiers: Mapping[str, ValueDomain] = field(
        factory=dict, converter=_freeze_domains, hash=False
    )
    slot_label: str | None = None
    description: str = ""

    @property
    def label(self) -> str:
        """Slot label under which a chain step of this command stores its result."""
        if self.slot_label:
            return self.slot_label
        return f"{self.name.lower()} results"

    def describe_keys(self) -> str:
        if not self.modifiers:
            return "no modifiers"
        return ", ".join(f"--{key}" for key in sorted(self.modifiers))

    @classmethod
    def from_spec(cls, name: str, spec: CommandSpec) -> "CommandSchema":
        return cls(
            name=name,
            requires_input=spec.requires_input,
            modifiers={key: build_domain(domain) for key, domain in spec.modifiers.items()},
            slot_label=spec.slot_label,
            description=spec.description,
        )

    def to_spec(self) -> CommandSpec:
        return CommandSpec(
            requires_input=self.requires_input,
            slot_label=self.slot_label,
            description=self.description,
            modifiers={key: domain_spec(domain) for key, domain in self.modifiers.items()},
        )


class GrammarRegistry:
    """Read-only mapping of command names to CommandSchema objects.

    Notes:
      - Lookups are exact and case-sensitive; normalization applies to
        modifier keys only.
      - Construction validates the whole table up front; a malformed table
        raises pydantic's ValidationError.
    """

    def __init__(self, schemas: Mapping[str, CommandSchema] | None = None):
        self._schemas = MappingProxyType(dict(schemas or {}))

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "GrammarRegistry":
        """Build a registry from a plain grammar mapping.

        Params:
            data: Command name -> command spec mapping (see CommandSpec)

        Returns:
            New registry containing exactly the given commands
        """
        spec = GrammarSpec.model_validate(dict(data))
        return cls._from_spec(spec.root)

    @classmethod
    def from_json(cls, text: str | bytes) -> "GrammarRegistry":
        """Build a registry from a JSON grammar document."""
        spec = GrammarSpec.model_validate_json(text)
        return cls._from_spec(spec.root)

    @classmethod
    def _from_spec(cls, commands: dict[str, CommandSpec]) -> "GrammarRegistry":
        return cls(
            {name: CommandSchema.from_spec(name, spec) for name, spec in commands.items()}
        )

    def extend(self, data: Mapping[str, Any]) -> "GrammarRegistry":
        """Return a new registry with commands added or replaced from data."""
        added = self._from_spec(GrammarSpec.model_validate(dict(data)).root)
        return GrammarRegistry({**self._schemas, **added._schemas})

    def get(self, name: str) -> CommandSchema:
        """Get the schema of a command.

        Raises:
            KeyError: If the command is not registered.
        """
        if name not in self._schemas:
            raise KeyError(
                f"Command {name} is not defined in the grammar. Available commands: {self.names()}"
            )
        return self._schemas[name]

    def has(self, name: str) -> bool:
        return name in self._schemas

    def names(self) -> list[str]:
        return list(self._schemas.keys())

    def to_data(self) -> dict[str, Any]:
        """Dump the grammar back to plain data, however the registry was built.

        Raises:
            TypeError: If a schema uses a custom ValueDomain with no data form.
        """
        return {name: schema.to_spec().model_dump() for name, schema in self._schemas.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)


@lru_cache(maxsize=1)
def default_registry() -> GrammarRegistry:
    """Registry seeded with the built-in command table."""
    from langcmd.grammar.defaults import DEFAULT_GRAMMAR

    return GrammarRegistry.from_data(DEFAULT_GRAMMAR)
