"""Hasura metadata sync routes."""
