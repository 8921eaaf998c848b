"""Supplier aggregate: a wholesaler or estate that stocks our products."""

from datetime import UTC, datetime

from protean.fields import DateTime, String

from cellar.domain import cellar


@cellar.aggregate
class Supplier:
    name = String(required=True, max_length=200)
    contact = String(max_length=200)
    location = String(max_length=200)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, contact=None, location=None):
        now = datetime.now(UTC)
        return cls(name=name, contact=contact, location=location, created_at=now, updated_at=now)

    def update(self, name=None, contact=None, location=None):
        if name is not None:
            self.name = name
        if contact is not None:
            self.contact = contact
        if location is not None:
            self.location = location
        self.updated_at = datetime.now(UTC)
