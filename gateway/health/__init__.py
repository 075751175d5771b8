"""Health endpoint."""
