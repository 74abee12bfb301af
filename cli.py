#!/usr/bin/env python3
"""
Command-line interface for the astrology-services relay.

Usage:
    uv run python cli.py [command] [options]

Commands:
    serve       Start the API server
    test        Run the test suite
    sign        Print the gateway signature for an order/payment pair

Examples:
    uv run python cli.py serve --reload
    uv run python cli.py test -v
    uv run python cli.py sign order_1 pay_1 --secret s3cret
"""

import argparse
import subprocess
import sys
from typing import Optional


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = ["uv", "run", "pytest"] + args
    subprocess.run(cmd)


def run_server(host: str, port: Optional[int], reload: bool) -> None:
    """Start the API server."""
    if port is None:
        from shared.config import get_settings
        port = get_settings().port

    cmd = ["uv", "run", "uvicorn", "api.main:app", f"--host={host}", f"--port={port}"]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    subprocess.run(cmd)


def run_sign(order_id: str, payment_id: str, secret: Optional[str]) -> None:
    """Print the signature /verify-payment expects for these ids."""
    from relay.payments import sign

    if secret is None:
        from shared.config import get_settings
        secret = get_settings().razorpay_key_secret
    if not secret:
        print("No secret given and RAZORPAY_KEY_SECRET is not set")
        sys.exit(1)

    print(sign(order_id, payment_id, secret))


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Astro Relay CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --reload
  %(prog)s serve --port 5000
  %(prog)s test -v
  %(prog)s sign order_1 pay_1 --secret s3cret
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Test command
    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Port to bind to (default: PORT setting)"
    )
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # Sign command
    sign_parser = subparsers.add_parser("sign", help="Compute a payment signature")
    sign_parser.add_argument("order_id", help="Gateway order id")
    sign_parser.add_argument("payment_id", help="Gateway payment id")
    sign_parser.add_argument(
        "--secret", default=None, help="Gateway secret (default: RAZORPAY_KEY_SECRET)"
    )

    args = parser.parse_args()

    if args.command == "test":
        run_tests(args.pytest_args)
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "sign":
        run_sign(args.order_id, args.payment_id, args.secret)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
