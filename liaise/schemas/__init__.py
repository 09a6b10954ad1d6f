"""Pydantic request/response schemas. Wire names are camelCase."""
