"""
Entry point: python server.py --data data/sample-interval-3s.json --interval 3s

Flags override MOCK_* environment variables (a .env file is honoured).
Serves HTTPS when both --certfile and --keyfile are given, plain HTTP otherwise.
"""
import argparse
import logging
import ssl
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import FastAPI

from config import Settings
from exceptions import MockServerError
from loader import load_snapshots
from main import create_app

logger = logging.getLogger(__name__)

# Forward secrecy only: ECDHE key exchange with AEAD ciphers
TLS_CIPHERS = ":".join([
    "ECDHE-ECDSA-AES256-GCM-SHA384",
    "ECDHE-RSA-AES256-GCM-SHA384",
    "ECDHE-ECDSA-CHACHA20-POLY1305",
    "ECDHE-RSA-CHACHA20-POLY1305",
    "ECDHE-ECDSA-AES128-GCM-SHA256",
    "ECDHE-RSA-AES128-GCM-SHA256",
])
TLS_CURVE = "prime256v1"
IDLE_TIMEOUT = 120


def harden_ssl_context(context: ssl.SSLContext) -> ssl.SSLContext:
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.set_ciphers(TLS_CIPHERS)
    context.set_ecdh_curve(TLS_CURVE)
    context.options |= ssl.OP_CIPHER_SERVER_PREFERENCE
    return context


def build_ssl_context(certfile: Path | str, keyfile: Path | str) -> ssl.SSLContext:
    context = harden_ssl_context(ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER))
    context.load_cert_chain(certfile=str(certfile), keyfile=str(keyfile))
    return context


def setup_server(settings: Settings, app: FastAPI) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=IDLE_TIMEOUT,
        log_level=settings.log_level.lower(),
        log_config=None,
        ssl_certfile=settings.certfile,
        ssl_keyfile=settings.keyfile,
        ssl_ciphers=TLS_CIPHERS,
    )
    config.load()
    if config.ssl is not None:
        # uvicorn has no knob for the minimum version or curves
        harden_ssl_context(config.ssl)
    return uvicorn.Server(config)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve rotating mock transit location data")
    parser.add_argument("--host", help="address to bind (default 0.0.0.0)")
    parser.add_argument("--port", type=int, help="port to listen on (default 8080)")
    parser.add_argument("--data", dest="data_file", help="file to use as mock data")
    parser.add_argument("--interval", help="time between data points, e.g. 3s or 500ms (default 3s)")
    parser.add_argument("--certfile", help="TLS certificate chain (PEM)")
    parser.add_argument("--keyfile", help="TLS private key (PEM)")
    parser.add_argument("--log-level", dest="log_level", help="logging level (default INFO)")
    parser.add_argument("--env-file", dest="env_file", help="dotenv file to read before the environment")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format='[%(levelname)s] %(name)s: %(message)s',
        stream=sys.stdout,
    )

    overrides = vars(args)
    env_file = overrides.pop("env_file")
    try:
        settings = Settings.from_env(env_file, **overrides)
        logging.getLogger().setLevel(settings.log_level)
        snapshots = load_snapshots(settings.data_file)
        server = setup_server(settings, create_app(settings, snapshots))
    except (MockServerError, OSError, ssl.SSLError) as e:
        logger.critical("%s", e)
        return 1

    logger.info("Starting server on %s:%d", settings.host, settings.port)
    server.run()
    # uvicorn exits without raising when it cannot bind or startup fails
    if not server.started:
        logger.critical("Server failed to start on %s:%d", settings.host, settings.port)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
