"""Domain error taxonomy raised by the service layer.

Every error carries a stable ``code`` (for clients to branch on), an HTTP
``status`` used by the API layer and a human readable message. Services never
catch these themselves except where a failure is an expected, recorded outcome
(bank ingestion); the Flask error handler turns them into the standard error
body.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class DomainError(Exception):
    code = 'DOMAIN_ERROR'
    status = 400
    title = 'Bad Request'
    default_message = 'Request could not be processed'

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def extra(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        body = {
            'status': self.status,
            'title': self.title,
            'code': self.code,
            'detail': self.message,
        }
        body.update(self.extra())
        return body


class NotFound(DomainError):
    code = 'NOT_FOUND'
    status = 404
    title = 'Not Found'
    default_message = 'Resource not found'


class InvalidState(DomainError):
    code = 'INVALID_STATE'
    status = 409
    title = 'Conflict'
    default_message = 'Resource is not in a valid state for this operation'


class InsufficientFunds(DomainError):
    code = 'INSUFFICIENT_FUNDS'
    status = 409
    title = 'Insufficient Funds'

    def __init__(self, needed: int, message: Optional[str] = None):
        self.needed = needed
        super().__init__(message or f'Insufficient points: {needed} more needed')

    def extra(self):
        return {'needed': self.needed}


class ProductMismatch(DomainError):
    code = 'PRODUCT_MISMATCH'
    status = 422
    title = 'Unprocessable Entity'

    def __init__(self, product_id: int, message: Optional[str] = None):
        self.product_id = product_id
        super().__init__(message or f'Product {product_id} is not in this head office catalog')

    def extra(self):
        return {'productId': self.product_id}


class ProductUnavailable(DomainError):
    code = 'PRODUCT_UNAVAILABLE'
    status = 409
    title = 'Conflict'

    def __init__(self, product_id: int, message: Optional[str] = None):
        self.product_id = product_id
        super().__init__(message or f'Product {product_id} is not available for ordering')

    def extra(self):
        return {'productId': self.product_id}


class InvalidAmount(DomainError):
    code = 'INVALID_AMOUNT'
    default_message = 'amount must be a positive integer'


class InvalidQuantity(DomainError):
    code = 'INVALID_QUANTITY'
    default_message = 'qty must be a positive integer'


class InvalidProduct(DomainError):
    code = 'INVALID_PRODUCT'
    default_message = 'productId must be a positive integer'


class Unauthorized(DomainError):
    code = 'UNAUTHORIZED'
    status = 401
    title = 'Unauthorized'
    default_message = 'Invalid credentials'


__all__ = [
    'DomainError', 'NotFound', 'InvalidState', 'InsufficientFunds', 'ProductMismatch',
    'ProductUnavailable', 'InvalidAmount', 'InvalidQuantity', 'InvalidProduct', 'Unauthorized',
]
