"""Validator resolver for Schema Intel.

Turns a single field validator expression into the type names used throughout
the schema model:

  Validator Expression            -> Type Names
  -----------------------------------------------
  v.string()                      -> ["string"]
  v.float64() / v.int64()         -> ["number"]
  v.id("projects")                -> ["Id<projects>"]
  v.literal("todo")               -> ['"todo"']
  v.optional(v.id("users"))       -> ["Id<users>"]
  v.optional(userRoleValidator)   -> ["userRole"]
  v.somethingElse(...)            -> ["somethingElse"]

This is a heuristic, not a compiler: unknown validators pass through as their
own name and nothing here raises. Optionality is tracked by the parser as a
rate, never as a type name.
"""

import re

from schema_intel.schema.lexer import TokenType, find_matching, is_token, tokenize


# Validators whose type name does not depend on their arguments.
PRIMITIVE_TYPES = {
    "string": "string",
    "number": "number",
    "float64": "number",
    "int64": "number",
    "boolean": "boolean",
    "bytes": "bytes",
    "any": "any",
    "null": "null",
    "null_": "null",
    "array": "array",
    "object": "object",
    "union": "union",
}

UNKNOWN_OPTIONAL = "unknown?"

# Hard cap on nested optional(...) wrappers.
MAX_RESOLVE_DEPTH = 16

# Bare identifiers that name a reusable validator, e.g. userRoleValidator,
# taskStatus, planType.
CUSTOM_VALIDATOR_PATTERN = re.compile(r"\w+Validator|\w+Status\w*|\w+Type\w*|\w+Role\w*")

_QUOTE_CHARS = "\"'`"


def resolve_validator(name: str, raw_args: str, _depth: int = 0) -> list[str]:
    """Resolve a validator call to a list of type names.

    Args:
        name: The validator name, e.g. "string" for v.string(...).
        raw_args: The raw source text between the call's parentheses.

    Returns:
        One or more type names. Never empty.
    """
    primitive = PRIMITIVE_TYPES.get(name)
    if primitive is not None:
        return [primitive]

    if name == "id":
        return [f"Id<{_strip_quotes(raw_args)}>"]

    if name == "literal":
        return [f'"{_strip_quotes(raw_args)}"']

    if name == "optional":
        return _resolve_optional(raw_args, _depth)

    return [name]


def _resolve_optional(raw_args: str, depth: int) -> list[str]:
    """Resolve the single argument of v.optional(...)."""
    if depth >= MAX_RESOLVE_DEPTH:
        return [UNKNOWN_OPTIONAL]

    inner = _first_validator_call(raw_args)
    if inner is not None:
        inner_name, inner_args = inner
        return resolve_validator(inner_name, inner_args, depth + 1)

    tokens = tokenize(raw_args)
    if tokens[0].type == TokenType.IDENTIFIER and tokens[1].type in (
        TokenType.EOF,
        TokenType.COMMA,
    ):
        return [strip_validator_suffix(tokens[0].value)]

    return [UNKNOWN_OPTIONAL]


def _first_validator_call(text: str) -> tuple[str, str] | None:
    """Find a leading v.<name>(...) call and return (name, raw argument text)."""
    tokens = tokenize(text)
    if not (
        is_token(tokens, 0, TokenType.IDENTIFIER, "v")
        and is_token(tokens, 1, TokenType.DOT)
        and is_token(tokens, 2, TokenType.IDENTIFIER)
        and is_token(tokens, 3, TokenType.LPAREN)
    ):
        return None

    close = find_matching(tokens, 3)
    end = tokens[close].start if close is not None else len(text)
    return tokens[2].value, text[tokens[3].end : end]


def _strip_quotes(raw_args: str) -> str:
    cleaned = raw_args.strip()
    for quote in _QUOTE_CHARS:
        cleaned = cleaned.replace(quote, "")
    return cleaned


def strip_validator_suffix(identifier: str) -> str:
    return re.sub(r"Validator$", "", identifier)


def custom_validator_type(identifier: str) -> str | None:
    """Type name for a custom validator reference, or None if the name doesn't look like one."""
    if CUSTOM_VALIDATOR_PATTERN.fullmatch(identifier) is None:
        return None
    return strip_validator_suffix(identifier)


def id_reference(name: str, raw_args: str) -> str | None:
    """Return the referenced table for v.id("t") or v.optional(v.id("t")).

    Only one level of optional wrapping counts as a relation.
    """
    if name == "optional":
        inner = _first_validator_call(raw_args)
        if inner is None or inner[0] != "id":
            return None
        name, raw_args = inner

    if name != "id":
        return None

    tokens = tokenize(raw_args)
    if tokens[0].type != TokenType.STRING or tokens[1].type != TokenType.EOF:
        return None
    table = tokens[0].value
    if not re.fullmatch(r"\w+", table):
        return None
    return table
