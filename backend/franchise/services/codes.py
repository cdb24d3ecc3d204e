"""Human-readable invite and merchant codes.

Codes are bearer secrets: head office invite codes are looked up by equality,
store merchant codes are kept only as a werkzeug hash.
"""
from __future__ import annotations
import secrets
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

# No 0/O, 1/I/L: codes get read out over the phone
ALPHABET = 'ABCDEFGHJKMNPQRSTUVWXYZ23456789'
GROUP_SIZE = 4
GROUPS = 2


def generate_code(prefix: Optional[str] = None, groups: int = GROUPS) -> str:
    parts = [''.join(secrets.choice(ALPHABET) for _ in range(GROUP_SIZE)) for _ in range(groups)]
    if prefix:
        parts.insert(0, normalize_code(prefix))
    return '-'.join(parts)


def normalize_code(raw: Optional[str]) -> str:
    return (raw or '').strip().upper()


def hash_code(raw: str) -> str:
    return generate_password_hash(normalize_code(raw))


def check_code(code_hash: str, raw: Optional[str]) -> bool:
    if not code_hash or not raw:
        return False
    return check_password_hash(code_hash, normalize_code(raw))
