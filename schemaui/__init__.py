"""schemaui — plugin runtime for the schema-driven UI interpreter."""

__version__ = "0.1.0"
