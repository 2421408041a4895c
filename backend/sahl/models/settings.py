from __future__ import annotations

from ..extensions import db


class Settings(db.Model):
    """Company profile and display preferences. Single row."""
    __tablename__ = "settings"

    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    mobile = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    website = db.Column(db.String(255), nullable=True)
    tax_number = db.Column(db.String(64), nullable=True)
    currency = db.Column(db.String(64), nullable=False, default="جنيه مصري")
    currency_symbol = db.Column(db.String(16), nullable=False, default="ج.م")
    decimal_places = db.Column(db.Integer, nullable=False, default=2)
    backup_path = db.Column(db.String(512), nullable=True)
    cloud_backup_path = db.Column(db.String(512), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_name": self.company_name,
            "address": self.address,
            "phone": self.phone,
            "mobile": self.mobile,
            "email": self.email,
            "website": self.website,
            "tax_number": self.tax_number,
            "currency": self.currency,
            "currency_symbol": self.currency_symbol,
            "decimal_places": self.decimal_places,
            "backup_path": self.backup_path,
            "cloud_backup_path": self.cloud_backup_path,
        }
