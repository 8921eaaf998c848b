"""Review commands.

Submitting or deleting a review recomputes the product's rating as the
mean of its remaining review ratings, in the same unit of work.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from cellar.catalogue.product.product import Product
from cellar.domain import cellar
from cellar.review.review import Review
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all, load

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text()


@cellar.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)


def reviews_for(product_id) -> list:
    reviews = find_all(Review, product_id=str(product_id))
    return sorted(reviews, key=lambda r: ensure_utc(r.created_at), reverse=True)


def _refresh_rating(product_id, ratings):
    product = load(Product, product_id)
    product.record_ratings(ratings)
    current_domain.repository_for(Product).add(product)


@cellar.command_handler(part_of=Review)
class ManageReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        load(Product, command.product_id)
        review = Review.create(
            product_id=command.product_id,
            user_id=command.user_id,
            rating=command.rating,
            comment=command.comment,
        )
        current_domain.repository_for(Review).add(review)

        ratings = [r.rating for r in reviews_for(command.product_id) if str(r.id) != str(review.id)]
        _refresh_rating(command.product_id, [*ratings, review.rating])
        logger.info("Review submitted", product_id=str(command.product_id), rating=review.rating)
        return str(review.id)

    @handle(DeleteReview)
    def delete_review(self, command):
        review = load(Review, command.review_id)
        review.ensure_owned_by(command.user_id)
        current_domain.repository_for(Review)._dao.delete(review)

        ratings = [r.rating for r in reviews_for(review.product_id) if str(r.id) != str(review.id)]
        _refresh_rating(review.product_id, ratings)
