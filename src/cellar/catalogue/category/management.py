"""Category management: create, update and delete commands."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from cellar.catalogue.category.category import Category
from cellar.domain import cellar
from cellar.errors import ConflictError
from cellar.shared.lookup import find_first, load

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Category")
class CreateCategory:
    name = String(required=True, max_length=100)
    description = Text()
    image_url = String(max_length=500)


@cellar.command(part_of="Category")
class UpdateCategory:
    category_id = Identifier(required=True)
    name = String(max_length=100)
    description = Text()
    image_url = String(max_length=500)


@cellar.command(part_of="Category")
class DeleteCategory:
    category_id = Identifier(required=True)


def _ensure_name_is_free(name, category_id=None):
    existing = find_first(Category, name=name.strip())
    if existing is not None and str(existing.id) != str(category_id):
        raise ConflictError("Category already exists", {"name": name})


@cellar.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        _ensure_name_is_free(command.name)

        category = Category.create(
            name=command.name,
            description=command.description,
            image_url=command.image_url,
        )
        current_domain.repository_for(Category).add(category)
        logger.info("Category created", category_id=str(category.id), name=category.name)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        category = load(Category, command.category_id)
        if command.name:
            _ensure_name_is_free(command.name, category_id=category.id)

        category.update(
            name=command.name,
            description=command.description,
            image_url=command.image_url,
        )
        current_domain.repository_for(Category).add(category)

    @handle(DeleteCategory)
    def delete_category(self, command):
        category = load(Category, command.category_id)
        current_domain.repository_for(Category)._dao.delete(category)
        logger.info("Category deleted", category_id=str(command.category_id))
