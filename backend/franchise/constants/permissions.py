"""Permission codes carried in access tokens.
Extend cautiously; never rename codes silently, tokens already issued still carry the old ones.
"""
from __future__ import annotations
from typing import List, Dict

SERVICE_ACTIONS = {
    'CAT': ['READ'],
    'ORDER': ['READ', 'CREATE'],
    'WALLET': ['READ', 'TOPUP'],
    'HEAD': ['ORDER.READ', 'WALLET.READ'],
    'ADMIN': ['TENANT.MANAGE', 'TOPUP.READ', 'TOPUP.APPROVE', 'BANK.INGEST', 'BANK.READ', 'WALLET.AUDIT'],
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_PERMISSION_CODES = build_all_permission_codes()

ROLE_STORE = 'Store'
ROLE_HEAD_OFFICE = 'HeadOffice'
ROLE_ADMIN = 'Admin'

ROLE_PRESETS: Dict[str, List[str]] = {
    ROLE_STORE: ['CAT.READ', 'ORDER.READ', 'ORDER.CREATE', 'WALLET.READ', 'WALLET.TOPUP'],
    ROLE_HEAD_OFFICE: ['CAT.READ', 'HEAD.ORDER.READ', 'HEAD.WALLET.READ'],
    ROLE_ADMIN: ['*'],
}


def permissions_for(role: str) -> List[str]:
    codes = ROLE_PRESETS.get(role, [])
    if '*' in codes:
        return sorted(ALL_PERMISSION_CODES)
    return sorted(codes)
