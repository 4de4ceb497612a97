from __future__ import annotations

from ..extensions import db
from ..models import Warehouse


class WarehouseError(Exception):
    """Raised when warehouse input is invalid."""
    pass


def create_warehouse(name: str | None, shortcode: str | None, address: str | None = None) -> Warehouse:
    name = str(name).strip() if name is not None else ""
    shortcode = str(shortcode).strip() if shortcode is not None else ""
    if not name or not shortcode:
        raise WarehouseError("Name and shortcode needed")
    if address is not None and not isinstance(address, str):
        raise WarehouseError("address must be text")

    warehouse = Warehouse(
        name=name,
        shortcode=shortcode,
        address=address.strip() if address is not None else None,
    )
    db.session.add(warehouse)
    db.session.commit()
    return warehouse


def list_warehouses() -> list[Warehouse]:
    return (
        db.session.query(Warehouse)
        .order_by(Warehouse.created_at.desc(), Warehouse.id.desc())
        .all()
    )
