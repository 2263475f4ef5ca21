"""Uvicorn server runner with custom configuration."""

import copy

import structlog
import uvicorn
from uvicorn.config import LOGGING_CONFIG

from gogrind.app import App
from gogrind.config import Config
from gogrind.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)


def build_log_config() -> dict:
    """Uvicorn logging with compact access lines."""
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - %(client_addr)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"
    return log_config


def run_server(app: App, config: Config) -> None:
    fastapi_app = create_fastapi_app(app, config)
    logger.info("server_starting", host=config.host, port=config.port, debug=config.debug)
    uvicorn.run(fastapi_app, host=config.host, port=config.port, log_config=build_log_config(), proxy_headers=True)
