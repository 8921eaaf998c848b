"""Faker-based payloads for the load test scenarios.

Field names follow the API's camelCase request schemas.
"""

import random
import uuid
from datetime import UTC, datetime, timedelta

from faker import Faker

fake = Faker()

GRAPES = ["Tempranillo", "Pinot Noir", "Cabernet Sauvignon", "Riesling", "Nebbiolo", "Chardonnay"]
REGIONS = ["Rioja", "Bordeaux", "Napa Valley", "Mosel", "Piedmont", "Burgundy"]


def category_name() -> str:
    return f"{fake.word().capitalize()} {uuid.uuid4().hex[:6]}"


def supplier_data() -> dict:
    return {"name": fake.company()[:200], "contact": fake.email(), "location": random.choice(REGIONS)}


def product_data(category_id=None, supplier_id=None) -> dict:
    grape = random.choice(GRAPES)
    payload = {
        "name": f"{fake.last_name()} {grape} {uuid.uuid4().hex[:4]}",
        "categoryId": category_id,
        "grape": grape,
        "region": random.choice(REGIONS),
        "vintage": random.randint(2005, 2023),
        "alcoholContent": round(random.uniform(11.5, 15.0), 1),
    }
    if supplier_id:
        payload["offers"] = [
            {
                "supplierId": supplier_id,
                "price": round(random.uniform(9.0, 120.0), 2),
                "quantity": random.randint(500, 2000),
            }
        ]
    else:
        payload["defaultPrice"] = round(random.uniform(9.0, 120.0), 2)
        payload["defaultQuantity"] = random.randint(500, 2000)
    return payload


def address_data() -> dict:
    return {
        "name": fake.name(),
        "address": fake.street_address(),
        "city": fake.city(),
        "state": fake.state(),
        "country": random.choice(["United States"] * 4 + ["Canada"]),
        "zip": fake.zipcode(),
        "phone": fake.phone_number(),
        "email": fake.email(),
        "shippingMethod": random.choice(["standard", "standard", "express", "overnight"]),
    }


def coupon_data() -> dict:
    return {
        "code": f"LT{uuid.uuid4().hex[:8].upper()}",
        "discountValue": random.choice([5, 10, 15]),
        "discountType": "percentage",
        "expiryDate": (datetime.now(UTC) + timedelta(days=7)).isoformat(),
    }


def flash_sale_data(product_ids) -> dict:
    start = datetime.now(UTC) - timedelta(minutes=1)
    return {
        "title": f"Flash {fake.word().capitalize()}",
        "description": fake.sentence(),
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(hours=1)).isoformat(),
        "discountPercentage": random.choice([10, 20, 30]),
        "products": [{"productId": product_id} for product_id in product_ids],
        "isActive": True,
        "totalStock": random.randint(50, 200),
    }
