#!/usr/bin/env python3
import argparse
import secrets
import sys

from passlib.context import CryptContext

from app.config import settings

# Random bytes in a session token
SESSION_TOKEN_BYTES = 32

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(plain_password: str) -> str:
    """Return a salted bcrypt hash for plain_password."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, stored_hash: str) -> bool:
    """Verify a candidate password against a stored bcrypt hash."""
    try:
        return pwd_context.verify(plain_password, stored_hash)
    except (ValueError, TypeError):
        # malformed or unknown hash
        return False


def generate_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def generate_random_password() -> str:
    return secrets.token_urlsafe(16)[:20]


def prompt_hidden(prompt_text: str) -> str:
    import getpass
    return getpass.getpass(prompt_text)


def main():
    parser = argparse.ArgumentParser(
        description="Print a bcrypt hash for a password, e.g. to seed a user row by hand."
    )
    parser.add_argument(
        "--generate", action="store_true",
        help="Generate a random password instead of prompting for one"
    )
    args = parser.parse_args()

    if args.generate:
        new_pass = generate_random_password()
        print(f"Password: {new_pass}")
    else:
        new_pass = prompt_hidden("Enter password (hidden): ").strip()
        if not new_pass:
            print("No password entered. Exiting.")
            sys.exit(1)
        new_pass2 = prompt_hidden("Confirm password: ").strip()
        if new_pass != new_pass2:
            print("Passwords do not match. Exiting.")
            sys.exit(1)

    print(hash_password(new_pass))


if __name__ == "__main__":
    main()
