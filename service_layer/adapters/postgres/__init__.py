"""Postgres adapter."""

from service_layer.adapters.postgres.probe import PostgresProbe, UnavailableDatabase, create_pool

__all__ = ["PostgresProbe", "UnavailableDatabase", "create_pool"]
