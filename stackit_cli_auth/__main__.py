#!/usr/bin/env python3
"""
STACKIT CLI credential helper - Main Entry Point
Checks and prints the provider credentials stored by 'stackit auth provider login'
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .auth import AuthError, CredentialResolver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='stackit-cli-auth',
        description='Inspect and refresh STACKIT CLI provider credentials',
    )
    parser.add_argument('--profile', help='CLI profile to use instead of the active one')
    parser.add_argument('--debug', action='store_true', help='Enable debug-level logging')
    parser.add_argument('--log-file', type=Path, help='Also write log output to this file')

    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('status', help='Show whether valid credentials are available')
    subparsers.add_parser('token', help='Print a valid access token, refreshing it if needed')
    return parser


def configure_logging(debug: bool, log_file: Optional[Path]) -> None:
    # Log to stderr so stdout only carries command output
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def show_status(resolver: CredentialResolver, profile: Optional[str]) -> int:
    try:
        credential = resolver.get_credential(profile)
    except AuthError as e:
        print("Not authenticated")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    expires = credential.expires_at.isoformat() if credential.expires_at else "never"
    print("Authenticated")
    print(f"  Profile: {credential.source_profile}")
    print(f"  Email:   {credential.email}")
    print(f"  Storage: {credential.storage_location.value}")
    print(f"  Expires: {expires}")
    return 0


def print_token(resolver: CredentialResolver, profile: Optional[str]) -> int:
    try:
        print(resolver.resolve(profile))
    except AuthError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None, resolver: Optional[CredentialResolver] = None) -> int:
    """Main application entry point"""
    args = build_parser().parse_args(argv)
    configure_logging(args.debug, args.log_file)

    if resolver is None:
        resolver = CredentialResolver()

    logger.debug(f"Running '{args.command}' command")
    if args.command == 'status':
        return show_status(resolver, args.profile)
    return print_token(resolver, args.profile)


if __name__ == "__main__":
    sys.exit(main())
