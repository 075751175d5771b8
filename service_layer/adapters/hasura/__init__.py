"""Hasura adapter."""

from service_layer.adapters.hasura.client import (
    Hasura,
    HasuraClient,
    UnavailableHasura,
    build_hasura_client,
)

__all__ = ["Hasura", "HasuraClient", "UnavailableHasura", "build_hasura_client"]
