# Overview: Service-layer operations for the single company settings row.

from __future__ import annotations

from ..extensions import db
from ..models import Settings
from ..validation import ModelValidationPolicy, ValidationError, validate_payload
from .concurrency import run_with_retry

DEFAULT_COMPANY_NAME = "شركتي"

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "company_name", "address", "phone", "mobile", "email", "website",
        "tax_number", "currency", "currency_symbol", "decimal_places",
        "backup_path", "cloud_backup_path",
    }),
)


def get_settings() -> Settings:
    """Return the settings row, creating it with defaults on first use."""
    settings = db.session.query(Settings).order_by(Settings.id).first()
    if settings is not None:
        return settings

    def _op():
        row = Settings(company_name=DEFAULT_COMPANY_NAME)
        db.session.add(row)
        db.session.commit()
        return row

    return run_with_retry(_op)


def update_settings(data: dict) -> Settings:
    if not data:
        raise ValidationError("No fields to update")
    patch = validate_payload(model=Settings, payload=data, policy=SETTINGS_POLICY, partial=True)
    if "decimal_places" in patch and not 0 <= patch["decimal_places"] <= 4:
        raise ValidationError("decimal_places must be between 0 and 4")

    def _op():
        settings = get_settings()
        for key, value in patch.items():
            setattr(settings, key, value)
        db.session.commit()
        return settings

    return run_with_retry(_op)
