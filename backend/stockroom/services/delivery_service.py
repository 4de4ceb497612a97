from __future__ import annotations

from ..extensions import db
from ..models import DeliveryOrder
from ..models.documents import DELIVERY_STATUSES
from ..validation import ValidationError
from .concurrency import lock_for_update, run_with_retry
from ..time_utils import utcnow


class DeliveryNotFoundError(Exception):
    """Raised when a delivery id does not exist."""
    pass


def list_deliveries() -> list[DeliveryOrder]:
    return (
        db.session.query(DeliveryOrder)
        .order_by(DeliveryOrder.created_at.desc(), DeliveryOrder.id.desc())
        .all()
    )


def update_delivery(
    delivery_id: int,
    *,
    status: str | None = None,
    tracking_number: str | None = None,
) -> DeliveryOrder:
    """
    Set status and/or tracking number on a delivery.

    Any status may follow any other. Omitted fields are left alone; the
    modification time is touched either way.
    """
    if status is not None and status not in DELIVERY_STATUSES:
        raise ValidationError(f"deliveryStatus must be one of: {', '.join(DELIVERY_STATUSES)}")
    if tracking_number is not None:
        tracking_number = str(tracking_number).strip() or None

    def _op():
        delivery = lock_for_update(db.session.query(DeliveryOrder).filter_by(id=delivery_id)).first()
        if not delivery:
            raise DeliveryNotFoundError("Delivery is not issued")

        if tracking_number and tracking_number != delivery.tracking_number:
            taken = db.session.query(DeliveryOrder.id).filter(
                DeliveryOrder.tracking_number == tracking_number,
                DeliveryOrder.id != delivery.id,
            ).first()
            if taken:
                raise ValidationError("Tracking number already in use")
            delivery.tracking_number = tracking_number

        if status is not None:
            delivery.status = status
        delivery.updated_at = utcnow()
        db.session.commit()
        return delivery

    return run_with_retry(_op)
