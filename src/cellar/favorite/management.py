"""Favorite commands and read helpers. One favorite per user and product."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from cellar.catalogue.product.product import Product
from cellar.domain import cellar
from cellar.errors import InvalidError
from cellar.favorite.favorite import Favorite
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all, find_first, load


@cellar.command(part_of="Favorite")
class AddFavorite:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@cellar.command(part_of="Favorite")
class RemoveFavorite:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


def _favorite(user_id, product_id):
    return find_first(Favorite, user_id=str(user_id), product_id=str(product_id))


@cellar.command_handler(part_of=Favorite)
class ManageFavoriteHandler:
    @handle(AddFavorite)
    def add_favorite(self, command):
        load(Product, command.product_id)
        if _favorite(command.user_id, command.product_id) is not None:
            raise InvalidError("Product is already in favorites", {"product_id": str(command.product_id)})

        favorite = Favorite.create(user_id=command.user_id, product_id=command.product_id)
        current_domain.repository_for(Favorite).add(favorite)
        return str(favorite.id)

    @handle(RemoveFavorite)
    def remove_favorite(self, command):
        favorite = _favorite(command.user_id, command.product_id)
        if favorite is None:
            raise InvalidError("Product is not in favorites", {"product_id": str(command.product_id)})
        current_domain.repository_for(Favorite)._dao.delete(favorite)


def favorites_of(user_id) -> list:
    favorites = find_all(Favorite, user_id=str(user_id))
    return sorted(favorites, key=lambda f: ensure_utc(f.created_at), reverse=True)


def is_favorite(user_id, product_id) -> bool:
    return _favorite(user_id, product_id) is not None
