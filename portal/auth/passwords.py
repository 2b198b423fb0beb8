"""
Password storage schemes.

``plain`` keeps the credential verbatim and compares by exact equality.
``bcrypt`` stores a bcrypt hash instead; it is opt-in via configuration.
"""

import bcrypt

PLAIN = "plain"
BCRYPT = "bcrypt"


def hash_password(password: str, scheme: str = PLAIN) -> str:
    """Return the value to store for ``password`` under ``scheme``"""
    if scheme == BCRYPT:
        salt = bcrypt.gensalt(rounds=12)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")
    if scheme == PLAIN:
        return password
    raise ValueError(f"Unknown password scheme: {scheme}")


def verify_password(password: str, stored: str, scheme: str = PLAIN) -> bool:
    """Verify a password against its stored value"""
    if scheme == BCRYPT:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
        except ValueError:
            # stored value is not a bcrypt hash
            return False
    return password == stored
