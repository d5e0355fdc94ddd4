"""CLI tools for schema-intel."""
