"""Review aggregate: a user's 1-5 star rating of a product."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, Text

from cellar.domain import cellar
from cellar.errors import ForbiddenError


@cellar.aggregate
class Review:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text()
    created_at = DateTime()

    @classmethod
    def create(cls, product_id, user_id, rating, comment=None):
        return cls(
            product_id=product_id,
            user_id=user_id,
            rating=rating,
            comment=comment,
            created_at=datetime.now(UTC),
        )

    def ensure_owned_by(self, user_id):
        if str(self.user_id) != str(user_id):
            raise ForbiddenError("Not authorized to delete this review", {"review_id": str(self.id)})
