"""Provider clients and domain services."""
