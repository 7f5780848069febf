#!/usr/bin/env python3
"""
Dev helper: ask a running Link Mailer backend to email a sign-in or
verification link.

Builds the request body, optionally adds a subDomain (verification link) or
an isSignIn query flag (query link mode), and POST-s it to the backend root.

Usage
-----
# Sign-in link to yourself, targeting localhost:8000
python scripts/send_test_email.py --email you@example.com

# Verification link (subdomain link mode)
python scripts/send_test_email.py --email you@example.com --sub-domain acme

# Query link mode: choose the link type explicitly
python scripts/send_test_email.py --email you@example.com --is-sign-in false

# Only send the CORS preflight
python scripts/send_test_email.py --preflight

# Target a different backend URL
python scripts/send_test_email.py --email you@example.com --url http://staging.example.com

Environment / .env
------------------
TEST_EMAIL    Default recipient when --email is not given.

The script reads .env in the project root (and backend/) if present.
"""

import argparse
import json
import os
import sys
import textwrap
from pathlib import Path

import httpx
from dotenv import load_dotenv


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------

def _build_payload(email: str, sub_domain: str | None) -> dict:
    """Build the JSON body for POST /."""
    payload = {"email": email}
    if sub_domain:
        payload["subDomain"] = sub_domain
    return payload


def _build_params(is_sign_in: str | None) -> dict:
    """Query parameters for query link mode; empty in subdomain mode."""
    if is_sign_in is None:
        return {}
    return {"isSignIn": is_sign_in}


# ---------------------------------------------------------------------------
# Pretty printer
# ---------------------------------------------------------------------------

def _print_response(response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if 200 <= status < 300 else "FAIL"
    print(f"\n[{symbol}] HTTP {status}")

    cors = {k: v for k, v in response.headers.items() if k.lower().startswith("access-control-")}
    if cors:
        print(json.dumps(cors, indent=2))

    if not response.content:
        return
    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    # Locate project root (scripts/ lives one level below the root)
    script_dir = Path(__file__).resolve().parent
    project_root = script_dir.parent
    load_dotenv(project_root / ".env")
    load_dotenv(project_root / "backend" / ".env")

    parser = argparse.ArgumentParser(
        prog="send_test_email.py",
        description=textwrap.dedent("""\
            Ask a Link Mailer backend to email a sign-in or verification link.
        """),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/send_test_email.py --email you@example.com
              python scripts/send_test_email.py --email you@example.com --sub-domain acme
              python scripts/send_test_email.py --email you@example.com --is-sign-in true
              python scripts/send_test_email.py --preflight
        """),
    )
    parser.add_argument(
        "--url",
        default="http://localhost:8000",
        help="Backend base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--email",
        default=os.getenv("TEST_EMAIL"),
        help="Recipient address (default: TEST_EMAIL env var)",
    )
    parser.add_argument(
        "--sub-domain",
        default=None,
        metavar="SEGMENT",
        help="subDomain path segment; requests a verification link in subdomain mode",
    )
    parser.add_argument(
        "--is-sign-in",
        default=None,
        metavar="BOOL",
        help="isSignIn query flag for query link mode (e.g. true/false)",
    )
    parser.add_argument(
        "--preflight",
        action="store_true",
        help="Send only an OPTIONS preflight request.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the request without sending it.",
    )

    args = parser.parse_args()

    endpoint = f"{args.url.rstrip('/')}/"

    if args.preflight:
        print(f"Endpoint  : OPTIONS {endpoint}")
        if args.dry_run:
            return 0
        try:
            response = httpx.options(endpoint)
        except httpx.HTTPError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        _print_response(response)
        return 0 if response.status_code == 204 else 1

    if not args.email:
        print(
            "ERROR: No recipient.\n"
            "Pass --email or set TEST_EMAIL in your environment or .env file.",
            file=sys.stderr,
        )
        return 1

    payload = _build_payload(args.email, args.sub_domain)
    params = _build_params(args.is_sign_in)

    print(f"Endpoint  : POST {endpoint}")
    print(f"Params    : {params or '-'}")
    print(f"Payload   : {json.dumps(payload)}")

    if args.dry_run:
        print("\n[DRY RUN] Not sent.")
        return 0

    try:
        response = httpx.post(endpoint, json=payload, params=params, timeout=30.0)
    except httpx.HTTPError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    _print_response(response)
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
