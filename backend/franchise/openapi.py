"""Minimal deterministic OpenAPI document for the public surface.

Paths are declared in one table (method, path, summary, required permission,
success status) and expanded into operations; schemas carry lifecycle
metadata via ``x-transitions`` where a status machine exists.
"""
from typing import Any, Dict, List, Optional, Tuple

from .models import BankTransaction, LedgerEntry, Order, Product, Store
from .services.topups import TOPUP_FSM

__all__ = ["build_openapi_spec"]

# (method, path, summary, permission, success status, paginated)
ENDPOINTS: List[Tuple[str, str, str, Optional[str], str, bool]] = [
    ("post", "/auth/verify-head", "Verify head office invite code", None, "200", False),
    ("post", "/auth/join-store", "Join a head office as a new store", None, "201", False),
    ("post", "/auth/login-store", "Store login with merchant code", None, "200", False),
    ("post", "/auth/admin-token", "Exchange the admin secret for a token", None, "200", False),
    ("get", "/products", "Head office catalog", "CAT.READ", "200", True),
    ("post", "/orders", "Place an order paid from the wallet", "ORDER.CREATE", "201", False),
    ("get", "/orders", "Orders of the calling store", "ORDER.READ", "200", True),
    ("get", "/orders/{order_id}", "Single order", "ORDER.READ", "200", False),
    ("get", "/wallet", "Wallet balance", "WALLET.READ", "200", False),
    ("get", "/wallet/ledger", "Ledger entries, newest first", "WALLET.READ", "200", True),
    ("post", "/wallet/topups", "Request a top-up", "WALLET.TOPUP", "201", False),
    ("get", "/wallet/topups", "Top-ups of the calling store", "WALLET.READ", "200", True),
    ("get", "/wallet/topups/{topup_id}", "Single top-up", "WALLET.READ", "200", False),
    ("get", "/head/orders", "Orders of the head office", "HEAD.ORDER.READ", "200", True),
    ("get", "/head/stores/{store_id}/wallet", "Balance of a branch", "HEAD.WALLET.READ", "200", False),
    ("post", "/admin/head-offices", "Create a head office", "ADMIN.TENANT.MANAGE", "201", False),
    ("patch", "/admin/stores/{store_id}", "Activate / deactivate a store", "ADMIN.TENANT.MANAGE", "200", False),
    ("get", "/admin/topups", "Top-up queue", "ADMIN.TOPUP.READ", "200", True),
    ("post", "/admin/topups/{topup_id}/approve", "Approve (credit) a top-up", "ADMIN.TOPUP.APPROVE", "200", False),
    ("post", "/admin/bank-transactions", "Ingest a bank deposit", "ADMIN.BANK.INGEST", "201", False),
    ("get", "/admin/bank-transactions", "Recorded bank deposits", "ADMIN.BANK.READ", "200", True),
    ("get", "/admin/stores/{store_id}/wallet", "Balance vs ledger check", "ADMIN.WALLET.AUDIT", "200", False),
]

ERROR_CODES = [
    "NOT_FOUND", "INVALID_STATE", "INSUFFICIENT_FUNDS", "PRODUCT_MISMATCH",
    "PRODUCT_UNAVAILABLE", "INVALID_AMOUNT", "INVALID_QUANTITY", "INVALID_PRODUCT", "UNAUTHORIZED",
]


def _schemas() -> Dict[str, Any]:
    def obj(props: Dict[str, str], required=("id",)):
        return {
            "type": "object",
            "properties": {k: {"type": v} for k, v in props.items()},
            "required": list(required),
        }

    schemas = {
        "Store": obj({"id": "integer", "name": "string", "headOfficeId": "integer", "status": "string"}),
        "Product": obj({"id": "integer", "name": "string", "price": "integer", "status": "string"}),
        "Order": obj({"id": "integer", "storeId": "integer", "totalAmount": "integer", "status": "string", "items": "array"}),
        "Wallet": obj({"storeId": "integer", "balance": "integer"}, required=("storeId", "balance")),
        "LedgerEntry": obj({"id": "integer", "type": "string", "amount": "integer", "refType": "string", "refId": "integer"}),
        "TopupRequest": obj({"id": "integer", "amount": "integer", "status": "string", "depositCode": "string"}),
        "BankTransaction": obj({"id": "integer", "externalTxId": "string", "amount": "integer", "status": "string"}),
        "Pagination": obj({"total": "integer", "limit": "integer", "offset": "integer", "returned": "integer"},
                          required=("total", "limit", "offset", "returned")),
        "Error": {
            "type": "object",
            "properties": {
                "error": {
                    "type": "object",
                    "properties": {
                        "status": {"type": "integer"},
                        "title": {"type": "string"},
                        "code": {"type": "string", "enum": ERROR_CODES},
                        "detail": {"type": "string"},
                        "needed": {"type": "integer"},
                    },
                    "required": ["status", "title", "detail"],
                }
            },
            "required": ["error"],
        },
    }
    schemas["Store"]["properties"]["status"]["enum"] = list(Store.ALL_STATUSES)
    schemas["Product"]["properties"]["status"]["enum"] = list(Product.ALL_STATUSES)
    schemas["Order"]["properties"]["status"]["enum"] = list(Order.ALL_STATUSES)
    schemas["LedgerEntry"]["properties"]["type"]["enum"] = list(LedgerEntry.ALL_TYPES)
    schemas["LedgerEntry"]["properties"]["refType"]["enum"] = list(LedgerEntry.ALL_REF_TYPES)
    schemas["TopupRequest"]["x-transitions"] = TOPUP_FSM.states()
    schemas["BankTransaction"]["properties"]["status"]["enum"] = list(BankTransaction.ALL_STATUSES)
    return schemas


def _operation(method: str, path: str, summary: str, perm: Optional[str], ok: str, paginated: bool) -> Dict[str, Any]:
    tag = path.split("/")[1].capitalize()
    rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
    op: Dict[str, Any] = {
        "summary": summary,
        "operationId": f"{method}_{rid}",
        "tags": [tag],
        "responses": {
            ok: {"description": "OK"},
            "default": {"description": "Error", "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}},
        },
    }
    params = [
        {"name": seg.strip("{}"), "in": "path", "required": True, "schema": {"type": "integer"}}
        for seg in path.split("/") if seg.startswith("{")
    ]
    if paginated:
        params += [{"$ref": "#/components/parameters/LimitParam"}, {"$ref": "#/components/parameters/OffsetParam"}]
        op["responses"][ok]["headers"] = {"ETag": {"schema": {"type": "string"}}}
    if params:
        op["parameters"] = params
    if perm:
        op["x-required-permissions"] = [perm]
    else:
        op["security"] = []
    return op


def build_openapi_spec() -> Dict[str, Any]:
    paths: Dict[str, Any] = {}
    for method, path, summary, perm, ok, paginated in ENDPOINTS:
        paths.setdefault(path, {})[method] = _operation(method, path, summary, perm, ok, paginated)
    tags = sorted({op["tags"][0] for ops in paths.values() for op in ops.values()})
    return {
        "openapi": "3.0.3",
        "info": {"title": "Franchise Points API", "version": "0.1.0"},
        "paths": paths,
        "components": {
            "schemas": _schemas(),
            "parameters": {
                "LimitParam": {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 50}},
                "OffsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer", "default": 0}},
            },
            "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        },
        "security": [{"BearerAuth": []}],
        "tags": [{"name": t, "description": f"{t} endpoints"} for t in tags],
    }
