#!/usr/bin/env python3
"""
Issue a development bearer token for the mock cart store.

The token is signed with CART_STORE_JWT_SECRET (see config/.env) and
carries the given user id as its subject.

Usage:
    python scripts/issue_token.py [user-id] [--hours N]
"""

import argparse
from datetime import timedelta

from cart_store.security.auth import create_access_token


def main():
    parser = argparse.ArgumentParser(description="Issue a cart store bearer token")
    parser.add_argument("user_id", nargs="?", default="demo-user", help="Token subject")
    parser.add_argument("--hours", type=int, default=24, help="Token lifetime in hours")
    args = parser.parse_args()

    token = create_access_token(args.user_id, expires_in=timedelta(hours=args.hours))

    print("=" * 60)
    print(f"Bearer token for {args.user_id} (valid {args.hours}h)")
    print("=" * 60)
    print(f"\n{token}\n")
    print("Start a cart session with:")
    print("  curl -X POST http://localhost:8000/api/cart/session \\")
    print("       -H 'Content-Type: application/json' \\")
    print(f"       -d '{{\"token\": \"{token}\"}}'")


if __name__ == "__main__":
    main()
