"""Collaborator adapters."""
