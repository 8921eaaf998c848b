"""Customer-owned collections: favorites and product reviews."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from cellar.api.catalogue import product_card
from cellar.api.deps import current_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import FavoriteRequest, ReviewRequest
from cellar.catalogue.product.product import Product
from cellar.favorite.management import AddFavorite, RemoveFavorite, favorites_of, is_favorite
from cellar.review.management import DeleteReview, SubmitReview, reviews_for
from cellar.review.review import Review
from cellar.shared.lookup import find_all, load

# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------
favorite_router = APIRouter(prefix="/favorites", tags=["favorites"])


@favorite_router.get("")
async def get_favorites(user_id: str = Depends(current_user_id)) -> dict:
    favorites = favorites_of(user_id)
    wanted = {str(f.product_id) for f in favorites}
    products = {str(p.id): p for p in find_all(Product) if str(p.id) in wanted}
    return ok(
        [
            {**serialize(f), "product": product_card(products[str(f.product_id)])}
            for f in favorites
            if str(f.product_id) in products
        ]
    )


@favorite_router.post("", status_code=201)
async def add_favorite(body: FavoriteRequest, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(AddFavorite(user_id=user_id, product_id=body.product_id), asynchronous=False)
    return ok({"product_id": body.product_id, "is_favorite": True}, message="Added to favorites")


@favorite_router.get("/{product_id}")
async def check_favorite(product_id: str, user_id: str = Depends(current_user_id)) -> dict:
    return ok({"product_id": product_id, "is_favorite": is_favorite(user_id, product_id)})


@favorite_router.delete("/{product_id}")
async def remove_favorite(product_id: str, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(RemoveFavorite(user_id=user_id, product_id=product_id), asynchronous=False)
    return ok({"product_id": product_id, "is_favorite": False}, message="Removed from favorites")


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("", status_code=201)
async def submit_review(body: ReviewRequest, user_id: str = Depends(current_user_id)) -> dict:
    command = SubmitReview(product_id=body.product_id, user_id=user_id, rating=body.rating, comment=body.comment)
    review_id = current_domain.process(command, asynchronous=False)
    return ok(serialize(load(Review, review_id)))


@review_router.get("/product/{product_id}")
async def product_reviews(product_id: str) -> dict:
    product = load(Product, product_id)
    return ok(
        [serialize(r) for r in reviews_for(product_id)],
        rating=product.rating,
        review_count=product.review_count,
    )


@review_router.delete("/{review_id}")
async def delete_review(review_id: str, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(DeleteReview(review_id=review_id, user_id=user_id), asynchronous=False)
    return ok(message="Review deleted")
