"""
flocker-volume: command line access to the Flocker volume client.

Usage:
    flocker-volume --agent-config /etc/flocker/agent.yml --client-ip 10.0.1.10 create pgdata
    flocker-volume --host 10.0.1.1 --ca-file cluster.crt --cert-file node.crt --key-file node.key lookup pgdata
    flocker-volume dataset-id pgdata

Environment Variables:
    FLOCKER_CONTROL_SERVICE_HOST: control service host
    FLOCKER_CONTROL_SERVICE_PORT: control service port (default: 4523)
    FLOCKER_CLIENT_IP: address this node is known by (default: control service host)
    FLOCKER_CA_FILE / FLOCKER_CERT_FILE / FLOCKER_KEY_FILE: mutual-TLS material
    FLOCKER_POLL_INTERVAL / FLOCKER_POLL_TIMEOUT: create polling, in seconds
    FLOCKER_LOG_LEVEL: log level (default: WARNING)
"""

import argparse
import json
import logging
import os
import signal
import sys
import threading
from typing import List, Optional

from flocker_client.client import FlockerClient
from flocker_client.config import ClientConfig
from flocker_client.errors import FlockerClientError, VolumeDoesNotExist
from flocker_client.identifiers import dataset_id_from_name
from shared.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flocker-volume", description="Manage Flocker volumes")
    parser.add_argument("--agent-config", help="Read control service and certificates from a Flocker agent.yml")
    parser.add_argument("--host", help="Control service host")
    parser.add_argument("--port", type=int, help="Control service port")
    parser.add_argument("--client-ip", help="Address matched against node states to find the primary")
    parser.add_argument("--ca-file", help="Cluster CA certificate")
    parser.add_argument("--cert-file", help="Client certificate")
    parser.add_argument("--key-file", help="Client key")
    parser.add_argument("--insecure-http", action="store_true", help="Talk plain HTTP (test clusters only)")
    parser.add_argument("--poll-interval", type=float, help="Seconds between state checks while creating")
    parser.add_argument("--poll-timeout", type=float, help="Give up creating after this many seconds")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--log-level", default=os.getenv("FLOCKER_LOG_LEVEL", "WARNING"), help="Log level")
    parser.add_argument("--log-file", help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    sub = subparsers.add_parser("dataset-id", help="Print the dataset id derived from a volume name")
    sub.add_argument("name")

    subparsers.add_parser("primary", help="Print the UUID of this node")

    sub = subparsers.add_parser("create", help="Create a volume and wait until it is mounted")
    sub.add_argument("name")
    sub.add_argument("--fail-if-exists", action="store_true", help="Exit with an error if the volume already exists")

    sub = subparsers.add_parser("lookup", help="Print the mount path of a volume")
    sub.add_argument("name")

    sub = subparsers.add_parser("query-id", help="Find a dataset id by its configured name")
    sub.add_argument("name")

    sub = subparsers.add_parser("update-primary", help="Move a volume to another node")
    sub.add_argument("name")
    sub.add_argument("primary", help="UUID of the new primary node")

    return parser


def load_config(args: argparse.Namespace) -> ClientConfig:
    overrides = {
        "host": args.host,
        "port": args.port,
        "client_ip": args.client_ip,
        "ca_cert_path": args.ca_file,
        "cert_path": args.cert_file,
        "key_path": args.key_file,
        "scheme": "http" if args.insecure_http else None,
        "poll_interval": args.poll_interval,
        "poll_timeout": args.poll_timeout,
    }
    if args.agent_config:
        return ClientConfig.from_agent_file(args.agent_config, **overrides)
    return ClientConfig.from_env(**overrides)


def _emit(args: argparse.Namespace, result: dict, plain: Optional[str]):
    if args.json:
        print(json.dumps(result, indent=2))
    elif plain is not None:
        print(plain)


def run_command(args: argparse.Namespace, client: FlockerClient) -> int:
    if args.command == "primary":
        primary = client.lookup_primary_uuid()
        _emit(args, {"primary": primary}, primary)

    elif args.command == "create":
        cancel_event = threading.Event()
        previous = signal.signal(signal.SIGTERM, lambda signum, frame: cancel_event.set())
        try:
            result = client.provision_volume(args.name, cancel_event, exist_ok=not args.fail_if_exists)
        finally:
            signal.signal(signal.SIGTERM, previous)
        _emit(
            args,
            {"outcome": result.outcome.value, "dataset_id": result.dataset_id, "value": result.value},
            result.value,
        )

    elif args.command == "lookup":
        path = client.lookup_volume(args.name)
        _emit(args, {"dataset_id": dataset_id_from_name(args.name), "path": path}, path or "")

    elif args.command == "query-id":
        dataset_id = client.query_dataset_id_from_name(args.name)
        _emit(args, {"name": args.name, "dataset_id": dataset_id}, dataset_id)

    elif args.command == "update-primary":
        client.update_dataset_primary(args.name, args.primary)
        _emit(args, {"dataset_id": dataset_id_from_name(args.name), "primary": args.primary}, None)

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging("flocker-volume", level=args.log_level, log_file=args.log_file)
    except ValueError as e:
        parser.error(str(e))

    # Pure computation, no control service needed
    if args.command == "dataset-id":
        dataset_id = dataset_id_from_name(args.name)
        _emit(args, {"name": args.name, "dataset_id": dataset_id}, dataset_id)
        return EXIT_OK

    try:
        config = load_config(args)
        with FlockerClient(config) as client:
            return run_command(args, client)
    except VolumeDoesNotExist as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except FlockerClientError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("interrupted", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
