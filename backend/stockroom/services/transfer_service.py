# backend/stockroom/services/transfer_service.py
"""
Product transfer service.

A transfer moves a product to a new location string and appends a Transfer
log entry recording where it came from. Both writes happen in one
transaction with the product row locked, so concurrent transfers of the
same product each log the location they actually moved it from.

The destination is free text: it is not checked against the warehouse
table, and moving a product to its current location is allowed.
"""
from __future__ import annotations
from ..extensions import db
from ..models import Product, Transfer
from .concurrency import lock_for_update, run_with_retry
from .products_service import ProductNotFoundError
from ..time_utils import utcnow


class TransferError(Exception):
    """Raised when transfer input is invalid."""
    pass


def transfer_product(product_id: int, to_location: str | None) -> Transfer:
    """
    Move a product and log the move.

    Raises:
        TransferError: destination missing or blank
        ProductNotFoundError: unknown product id
    """
    if not isinstance(to_location, str) or not to_location.strip():
        raise TransferError("transfer location needed")
    to_location = to_location.strip()

    def _op():
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if not product:
            raise ProductNotFoundError("product not found")

        transfer = Transfer(
            product_id=product.id,
            from_location=product.location,
            to_location=to_location,
        )
        product.location = to_location
        product.updated_at = utcnow()

        db.session.add(transfer)
        db.session.commit()
        return transfer

    return run_with_retry(_op)


def list_transfers() -> list[Transfer]:
    return (
        db.session.query(Transfer)
        .order_by(Transfer.created_at.desc(), Transfer.id.desc())
        .all()
    )
