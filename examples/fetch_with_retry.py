"""Fetch a URL, retrying connection failures.

    python examples/fetch_with_retry.py https://httpbin.org/delay/1
"""

import logging
import sys

import requests

from http_timeout_retry import ConfigManager, PendingRequest, default_registry

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
default_registry.register("http")

config = ConfigManager()
client = PendingRequest(timeout=2.0, settings=config.get_retry_config())

try:
    response = client.with_timeout_retry(attempts=4, delay=250, logging_enabled=True).get(sys.argv[1])
except requests.RequestException as e:
    print(f"Giving up: {e}")
    sys.exit(1)

print(response.status_code, response.reason)
