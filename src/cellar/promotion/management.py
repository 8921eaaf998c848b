"""Promotion administration: create, update and delete."""

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, List, String, Text
from protean.utils.globals import current_domain

from cellar.domain import cellar
from cellar.errors import ConflictError
from cellar.promotion.promotion import Promotion, PromotionDiscountType
from cellar.shared.lookup import find_first, load

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Promotion")
class CreatePromotion:
    title = String(required=True, max_length=100)
    description = Text()
    code = String(max_length=20)
    discount_type = String(required=True, choices=PromotionDiscountType)
    discount_value = Float(required=True, min_value=0.0)
    start_date = DateTime()
    end_date = DateTime(required=True)
    minimum_purchase = Float(min_value=0.0)
    maximum_discount = Float(min_value=0.0)
    applicable_product_ids = List(content_type=String)
    applicable_category_ids = List(content_type=String)
    is_first_purchase_only = Boolean()
    usage_limit_per_user = Integer(min_value=1)
    total_usage_limit = Integer(min_value=1)
    is_active = Boolean()
    is_visible = Boolean()
    locations = List(content_type=String)
    included_user_ids = List(content_type=String)
    excluded_user_ids = List(content_type=String)
    priority = Integer(min_value=1, max_value=100)
    stackable = Boolean()


@cellar.command(part_of="Promotion")
class UpdatePromotion:
    promotion_id = Identifier(required=True)
    title = String(max_length=100)
    description = Text()
    code = String(max_length=20)
    discount_type = String(choices=PromotionDiscountType)
    discount_value = Float(min_value=0.0)
    start_date = DateTime()
    end_date = DateTime()
    minimum_purchase = Float(min_value=0.0)
    maximum_discount = Float(min_value=0.0)
    applicable_product_ids = List(content_type=String)
    applicable_category_ids = List(content_type=String)
    is_first_purchase_only = Boolean()
    usage_limit_per_user = Integer(min_value=1)
    total_usage_limit = Integer(min_value=1)
    is_active = Boolean()
    is_visible = Boolean()
    locations = List(content_type=String)
    included_user_ids = List(content_type=String)
    excluded_user_ids = List(content_type=String)
    priority = Integer(min_value=1, max_value=100)
    stackable = Boolean()


@cellar.command(part_of="Promotion")
class DeletePromotion:
    promotion_id = Identifier(required=True)


_OPTIONAL_FIELDS = (
    "description",
    "minimum_purchase",
    "maximum_discount",
    "applicable_product_ids",
    "applicable_category_ids",
    "is_first_purchase_only",
    "usage_limit_per_user",
    "total_usage_limit",
    "is_active",
    "is_visible",
    "locations",
    "included_user_ids",
    "excluded_user_ids",
    "priority",
    "stackable",
)


def _provided(command):
    """Optional fields that were actually supplied; empty lists count as omitted."""
    values = {name: getattr(command, name) for name in _OPTIONAL_FIELDS}
    return {name: value for name, value in values.items() if value is not None and value != []}


def _ensure_code_free(code, promotion_id=None):
    existing = find_first(Promotion, code=code.strip().upper())
    if existing is not None and str(existing.id) != str(promotion_id):
        raise ConflictError("Promotion code already exists", {"code": existing.code})


@cellar.command_handler(part_of=Promotion)
class ManagePromotionHandler:
    @handle(CreatePromotion)
    def create_promotion(self, command):
        if command.code:
            _ensure_code_free(command.code)

        promotion = Promotion.create(
            title=command.title,
            code=command.code,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            start_date=command.start_date,
            end_date=command.end_date,
            **{name: getattr(command, name) for name in _OPTIONAL_FIELDS},
        )
        current_domain.repository_for(Promotion).add(promotion)
        logger.info("Promotion created", code=promotion.code, promotion_id=str(promotion.id))
        return str(promotion.id)

    @handle(UpdatePromotion)
    def update_promotion(self, command):
        promotion = load(Promotion, command.promotion_id)
        if command.code:
            _ensure_code_free(command.code, promotion.id)

        promotion.update(
            title=command.title,
            code=command.code,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            start_date=command.start_date,
            end_date=command.end_date,
            **_provided(command),
        )
        current_domain.repository_for(Promotion).add(promotion)
        logger.info("Promotion updated", code=promotion.code, promotion_id=str(promotion.id))

    @handle(DeletePromotion)
    def delete_promotion(self, command):
        promotion = load(Promotion, command.promotion_id)
        promotion.ensure_deletable()
        current_domain.repository_for(Promotion)._dao.delete(promotion)
        logger.info("Promotion deleted", code=promotion.code, promotion_id=str(promotion.id))
