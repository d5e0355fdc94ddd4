"""schema-intel - Schema intelligence for TypeScript-declared document databases."""

__version__ = "0.1.0"
