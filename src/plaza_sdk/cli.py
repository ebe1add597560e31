"""
Command-line interface for Plaza Python SDK
Provides request signing diagnostics, error classification and signed GET requests
"""

import argparse
import json
import logging
import sys
from typing import Optional

from . import __version__
from .classification.classifier import classify
from .classification.types import ClassifiedError
from .config.client_config import ClientConfig
from .exceptions import PlazaSDKError
from .http_client import PlazaHttpClient
from .signing.hmac_signer import PlazaSigner
from .signing.types import Credential, DigestAlgorithm, RequestDescriptor, SigningConfig, SigningError, HttpMethod


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='plaza-cli',
        description='Plaza SDK command-line interface for request signing diagnostics'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Plaza Python SDK {__version__}'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='WARNING',
        help='Logging level (default: WARNING)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_sign_parser(subparsers)
    setup_classify_parser(subparsers)
    setup_get_parser(subparsers)

    return parser


def setup_sign_parser(subparsers):
    """Setup request signing subcommand."""
    sign_parser = subparsers.add_parser('sign', help='Sign a request and print the canonical string and headers')
    sign_parser.add_argument('--public-key', required=True, help='Merchant public key')
    sign_parser.add_argument('--private-key', required=True, help='Merchant private key')
    sign_parser.add_argument(
        '--method',
        choices=[m.value for m in HttpMethod],
        default='GET',
        help='HTTP method (default: GET)'
    )
    sign_parser.add_argument('--path', required=True, help='Target path including query string')
    sign_parser.add_argument('--content-type', default='', help='Content type of the body')
    sign_parser.add_argument('--date', help='HTTP-date to sign (default: now)')
    sign_parser.add_argument('--body-file', help='File whose contents are the request body')
    sign_parser.add_argument(
        '--digest',
        choices=[d.value for d in DigestAlgorithm],
        default=DigestAlgorithm.SHA256.value,
        help='HMAC digest algorithm (default: sha256)'
    )


def setup_classify_parser(subparsers):
    """Setup error classification subcommand."""
    classify_parser = subparsers.add_parser('classify', help='Classify a failed HTTP response')
    classify_parser.add_argument('status', type=int, help='HTTP status code')
    classify_parser.add_argument('--body-file', help='File containing the response body')
    classify_parser.add_argument('--content-type', help='Content-Type of the response')


def setup_get_parser(subparsers):
    """Setup signed GET subcommand."""
    get_parser = subparsers.add_parser('get', help='Send a signed GET request using PLAZA_* environment settings')
    get_parser.add_argument('path', help='Path relative to the API base URL')
    get_parser.add_argument('--config-file', help='JSON configuration file instead of environment variables')


def _read_file(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    with open(path, 'rb') as f:
        return f.read()


def handle_sign_command(args) -> int:
    """Handle request signing."""
    credential = Credential(public_key=args.public_key, private_key=args.private_key)
    signer = PlazaSigner(SigningConfig(digest_algorithm=DigestAlgorithm(args.digest)))

    descriptor = RequestDescriptor(
        method=args.method,
        path=args.path,
        content_type=args.content_type,
        date=args.date,
        body=_read_file(args.body_file),
    )
    signed = signer.prepare(descriptor, credential)

    print(json.dumps({
        'canonical_string': signed.canonical_string,
        'signature': signed.signature,
        'headers': signed.headers,
    }, indent=2))
    return 0


def handle_classify_command(args) -> int:
    """Handle error classification."""
    error = classify(args.status, _read_file(args.body_file), args.content_type)
    print(json.dumps(error.to_dict(), indent=2))
    return 0


def handle_get_command(args) -> int:
    """Handle a signed GET request."""
    if args.config_file:
        config = ClientConfig.from_file(args.config_file)
    else:
        config = ClientConfig.from_env()

    with PlazaHttpClient(config) as client:
        try:
            response = client.request('GET', args.path)
        except ClassifiedError as e:
            print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
            return 1

    print(response.text)
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        if args.command == 'sign':
            return handle_sign_command(args)
        elif args.command == 'classify':
            return handle_classify_command(args)
        elif args.command == 'get':
            return handle_get_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except (PlazaSDKError, SigningError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
