"""Gateway - FastAPI front for the service layer and Hasura."""

from gateway.app import create_app
from gateway.config import GatewayConfig

__all__ = ["create_app", "GatewayConfig"]
