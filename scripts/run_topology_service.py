"""
Topology Service Launcher

Starts the topology service: discovers CSI persistent volumes and serves
them to a JSON dashboard data source over HTTPS.

Usage:
    python scripts/run_topology_service.py --host 0.0.0.0 --port 8443

Environment Variables:
    TOPOLOGY_CONFIG_FILE: YAML config file (default: /etc/config/karavi-topology.yaml)
    PROVISIONER_NAMES: Comma-separated CSI driver names to track
    PORT: HTTPS port (default: 443)
    TLS_CERT_PATH / TLS_KEY_PATH: Certificate and key (default: /certs/localhost.crt|key)
    LOG_LEVEL / LOG_FORMAT: Logging level and format (text|json)
    DEBUG: Mount /debug routes (default: false)
    KUBECONFIG: Use this kubeconfig instead of in-cluster config
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from shared.logging_config import setup_logging
from topology.config import load_settings
from topology.service import build_service
from topology.startup_profile import StartupProfile, validate_topology_profile


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the CSI volume topology service")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args()

    settings = load_settings(args.config)
    port = args.port or settings.port
    logger = setup_logging("topology", level=settings.log_level, log_format=settings.log_format)

    profile = StartupProfile(host=args.host, port=port, cert_file=settings.cert_file, key_file=settings.key_file)
    try:
        validate_topology_profile(profile)
    except ValueError as e:
        logger.critical(f"Service startup failed: {e}")
        sys.exit(1)

    logger.info(f"API Address: {args.host}:{port} (TLS)")
    logger.info(f"Config file: {settings.config_file}")

    app = build_service(settings)
    uvicorn.run(
        app,
        host=args.host,
        port=port,
        ssl_certfile=settings.cert_file,
        ssl_keyfile=settings.key_file,
        log_config=None,
    )


if __name__ == "__main__":
    main()
