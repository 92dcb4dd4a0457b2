#!/usr/bin/env python3
"""
FairGate Command Line Interface

Usage:
    fairgate keygen
    fairgate sign --key <seed> (--message <text> | --message-file <file>)
    fairgate challenge <wallet>
    fairgate verify-permit <token>
    fairgate decide <score>
"""

import argparse
import json
import sys

from .challenge import ChallengeIssuer
from .config import get_settings
from .decision import decide
from .errors import FairGateError
from .permit import PermitVerifier
from .signatures import generate_wallet, sign_message, wallet_address_from_seed
from .tokens import TokenCodec


def _codec() -> TokenCodec:
    return TokenCodec(get_settings().require_secret())


def cmd_keygen(args):
    """Generate a demo Ed25519 wallet."""
    address, seed = generate_wallet()
    print(json.dumps({"wallet": address, "secret_seed_b58": seed}, indent=2))
    print("\nKeep the seed private; it signs challenges for this wallet.", file=sys.stderr)
    return 0


def cmd_sign(args):
    """Sign a challenge message like a wallet would."""
    if args.message_file:
        with open(args.message_file, "r", encoding="utf-8") as f:
            message = f.read()
    else:
        message = args.message.replace("\\n", "\n")
    print(json.dumps({
        "wallet": wallet_address_from_seed(args.key),
        "signature": sign_message(args.key, message.encode("utf-8")),
    }, indent=2))
    return 0


def cmd_challenge(args):
    """Issue a challenge offline using PERMIT_SECRET."""
    settings = get_settings()
    issuer = ChallengeIssuer(_codec(), ttl_seconds=settings.challenge_ttl_seconds)
    challenge = issuer.issue_challenge(args.wallet)
    print(json.dumps({
        "token": challenge.token,
        "message": challenge.message,
        "expires_at": challenge.expires_at,
    }, indent=2))
    return 0


def cmd_verify_permit(args):
    """Verify a permit token."""
    try:
        payload = PermitVerifier(_codec()).verify_permit(args.token)
    except FairGateError as e:
        print(f"INVALID: {e.reason}")
        return 1
    print("VALID")
    print(json.dumps(payload.to_dict(), indent=2))
    return 0


def cmd_decide(args):
    """Show the tier decision for a score."""
    print(json.dumps(decide(args.score).to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fairgate",
        description="FairGate permit CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fairgate keygen
  fairgate challenge <wallet>
  fairgate sign -k <seed> -f message.txt
  fairgate verify-permit <permit>
  fairgate decide 72.5
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("keygen", help="Generate a demo wallet")

    sign_parser = subparsers.add_parser("sign", help="Sign a challenge message")
    sign_parser.add_argument("-k", "--key", required=True, help="Base58 secret seed")
    group = sign_parser.add_mutually_exclusive_group(required=True)
    group.add_argument("-m", "--message", help="Message text (\\n for newlines)")
    group.add_argument("-f", "--message-file", help="File holding the exact message")

    challenge_parser = subparsers.add_parser("challenge", help="Issue a challenge")
    challenge_parser.add_argument("wallet", help="Base58 wallet address")

    verify_parser = subparsers.add_parser("verify-permit", help="Verify a permit")
    verify_parser.add_argument("token", help="Permit token")

    decide_parser = subparsers.add_parser("decide", help="Tier decision for a score")
    decide_parser.add_argument("score", type=float, help="Reputation score")

    return parser


COMMANDS = {
    "keygen": cmd_keygen,
    "sign": cmd_sign,
    "challenge": cmd_challenge,
    "verify-permit": cmd_verify_permit,
    "decide": cmd_decide,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 2
    try:
        return handler(args)
    except FairGateError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
