from __future__ import annotations

from ..extensions import db
from tcoffice.time_utils import to_utc_z


class StockItem(db.Model):
    """
    Inventory line with a user-supplied id.

    total_quantity and balance_quantity are recorded as entered; no
    relation between them is enforced.
    """
    __tablename__ = "stock_items"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(120), nullable=False)
    colour = db.Column(db.String(64), nullable=False)
    total_quantity = db.Column(db.Integer, nullable=False)
    balance_quantity = db.Column(db.Integer, nullable=False, default=0)
    rack_no = db.Column(db.String(32), nullable=True)
    size = db.Column(db.String(32), nullable=True)

    # bulk, retail
    bulk_retail = db.Column(db.String(8), nullable=False, default="bulk")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<StockItem id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "colour": self.colour,
            "total_quantity": self.total_quantity,
            "balance_quantity": self.balance_quantity,
            "rack_no": self.rack_no,
            "size": self.size,
            "bulk_retail": self.bulk_retail,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at) if self.updated_at else None,
        }
