"""
Simple configuration for SubnetLab.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Basic settings
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 7861))
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
MCP_ENABLED = os.getenv("MCP_ENABLED", "true").lower() == "true"

# Engine settings
LEGACY_RESERVED_SUBNETS = os.getenv("LEGACY_RESERVED_SUBNETS", "true").lower() == "true"
MAX_GENERATION_ATTEMPTS = int(os.getenv("MAX_GENERATION_ATTEMPTS", 30))
MAX_RESULT_ROWS = int(os.getenv("MAX_RESULT_ROWS", 512))

# App info
APP_NAME = "SubnetLab"
VERSION = "1.0.0"
DESCRIPTION = "IPv4 subnetting calculator and exercise trainer"
