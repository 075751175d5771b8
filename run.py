#!/usr/bin/env python3
"""Development server for the gateway."""

import logging

import uvicorn

from gateway import create_app
from gateway.config import GatewayConfig
from service_layer import ServiceLayerConfig

if __name__ == "__main__":
    gateway_config = GatewayConfig.from_env()
    logging.basicConfig(
        level=gateway_config.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = create_app(
        gateway_config=gateway_config,
        service_config=ServiceLayerConfig.from_env(),
    )

    uvicorn.run(
        app,
        host=gateway_config.host,
        port=gateway_config.port,
        reload=False,
        log_level=gateway_config.log_level.lower(),
    )
