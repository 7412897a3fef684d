"""
SubnetLab - IPv4 Subnetting Calculator and Exercise Trainer
"""

import logging
from typing import Dict

from . import config
from .ui import create_interface

logging.basicConfig(
    level=logging.INFO if not config.DEBUG else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def engine_settings() -> Dict:
    """Calculator and generator policy the server runs with."""
    return {
        "legacy_reserved_subnets": config.LEGACY_RESERVED_SUBNETS,
        "max_generation_attempts": config.MAX_GENERATION_ATTEMPTS,
        "max_result_rows": config.MAX_RESULT_ROWS,
    }


def launch_options() -> Dict:
    return {
        "server_name": config.HOST,
        "server_port": config.PORT,
        "share": False,
        "show_error": config.DEBUG,
        "mcp_server": config.MCP_ENABLED,
        "quiet": not config.DEBUG
    }


def main():
    """Build the SubnetLab app and serve it until interrupted."""
    logger.info(f"Starting {config.APP_NAME} v{config.VERSION}")

    settings = engine_settings()
    policy = "reserved" if settings["legacy_reserved_subnets"] else "usable"
    logger.info(
        f"🧮 Subnet zero and all-ones: {policy}; "
        f"generator retries: {settings['max_generation_attempts']}; "
        f"table rows: {settings['max_result_rows']}"
    )

    app = create_interface()

    logger.info(f"🌐 Web Interface: http://{config.HOST}:{config.PORT}")
    if config.MCP_ENABLED:
        logger.info(f"🤖 MCP Server: http://{config.HOST}:{config.PORT}/gradio_api/mcp/sse")

    try:
        app.launch(**launch_options())
    except KeyboardInterrupt:
        logger.info("👋 Shutting down...")
    except Exception as e:
        logger.error(f"❌ Error launching {config.APP_NAME}: {e}")


if __name__ == "__main__":
    main()
