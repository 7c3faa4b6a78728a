"""Security utilities: password hashing, join codes, record ids."""

import secrets
import string
import time

import bcrypt

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6


# --- Password Hashing ---

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # malformed stored hash
        return False


# --- Join Code ---

def generate_family_code() -> str:
    """Generate a 6-char uppercase alphanumeric join code.

    Uniform over [A-Z0-9]. Not checked against existing codes.
    """
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(code: str) -> str:
    return code.strip().upper()


# --- Record Ids ---

def new_record_id(prefix: str) -> str:
    return f"{prefix}_{secrets.token_hex(6)}"


def new_message_id() -> str:
    """Message ids are unique but not sortable; order comes from timestamps."""
    return f"msg_{int(time.time() * 1000)}_{secrets.token_hex(5)}"
