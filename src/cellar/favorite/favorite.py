"""Favorite aggregate: a product a user has bookmarked."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier

from cellar.domain import cellar


@cellar.aggregate
class Favorite:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    created_at = DateTime()

    @classmethod
    def create(cls, user_id, product_id):
        return cls(user_id=user_id, product_id=product_id, created_at=datetime.now(UTC))
