"""
Modifier validation against command schemas.

Validation is pure: it never mutates its inputs and returns a new mapping
equal to the modifiers it was given, so validating an already valid
invocation again yields the same result.
"""

from collections.abc import Mapping

from langcmd.core.values import ModifierValue
from langcmd.exceptions import ErrorContext, ValidationError
from langcmd.grammar.registry import CommandSchema, GrammarRegistry


def validate_modifier(
    schema: CommandSchema,
    key: str,
    value: ModifierValue,
    context: ErrorContext | None = None,
) -> ModifierValue:
    """
    Validate one modifier against a command schema.

    Params:
        schema: Schema of the command the modifier is attached to
        key: Normalized (lowercase) modifier key
        value: Classified modifier value
        context: Source location used in the error, if any

    Returns:
        The accepted value, unchanged

    Raises:
        ValidationError: If the key is unknown or the value is outside its domain
    """
    domain = schema.modifiers.get(key)
    if domain is None:
        raise ValidationError(
            schema.name,
            key,
            None,
            schema.describe_keys(),
            context,
            reason="unknown modifier key",
        )

    reason = domain.check(value)
    if reason is not None:
        raise ValidationError(
            schema.name, key, value.render(), domain.describe(), context, reason=reason
        )
    return value


def validate_modifiers(
    schema: CommandSchema,
    modifiers: Mapping[str, ModifierValue],
    contexts: Mapping[str, ErrorContext] | None = None,
) -> dict[str, ModifierValue]:
    """
    Validate all modifiers of an invocation, failing on the first bad one.

    Params:
        schema: Schema of the command
        modifiers: Normalized key -> value mapping, in textual order
        contexts: Optional per-key source locations for error reporting

    Returns:
        New mapping with the same keys and values
    """
    contexts = contexts or {}
    return {
        key: validate_modifier(schema, key, value, contexts.get(key))
        for key, value in modifiers.items()
    }


def validate_invocation(invocation, registry: GrammarRegistry) -> dict[str, ModifierValue]:
    """Re-validate a parsed Invocation against a registry."""
    schema = registry.get(invocation.command_name)
    context = ErrorContext(
        line=invocation.line,
        column=invocation.column,
        command_text=invocation.command_name,
    )
    return validate_modifiers(
        schema, invocation.modifiers, {key: context for key in invocation.modifiers}
    )
