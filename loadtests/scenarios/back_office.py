"""Merchandiser journeys: stock the catalogue and run discounts."""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import (
    category_name,
    coupon_data,
    flash_sale_data,
    product_data,
    supplier_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import MerchandiserState


class CatalogueStockingJourney(SequentialTaskSet):
    """Create Category -> Create Supplier -> Create Products -> Launch Flash Sale."""

    def on_start(self):
        self.state = MerchandiserState()

    def _create(self, path, payload, name):
        with self.client.post(
            path, json=payload, headers=self.state.headers, catch_response=True, name=name
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"{name} failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            return resp.json()["data"]["id"]

    @task
    def create_category(self):
        self.state.category_id = self._create("/categories", {"name": category_name()}, "POST /categories")

    @task
    def create_supplier(self):
        self.state.supplier_id = self._create("/suppliers", supplier_data(), "POST /suppliers")

    @task
    def create_products(self):
        for _ in range(random.randint(2, 4)):
            product_id = self._create(
                "/products",
                product_data(self.state.category_id, self.state.supplier_id),
                "POST /products",
            )
            self.state.product_ids.append(product_id)

    @task
    def launch_flash_sale(self):
        self._create("/flash-sales", flash_sale_data(self.state.product_ids[:1]), "POST /flash-sales")

    @task
    def done(self):
        self.interrupt()


class CouponCampaignJourney(SequentialTaskSet):
    """Create Coupon -> Validate it -> Review the promotion report."""

    def on_start(self):
        self.state = MerchandiserState()
        self.code = None

    @task
    def create_coupon(self):
        payload = coupon_data()
        with self.client.post(
            "/coupons", json=payload, headers=self.state.headers, catch_response=True, name="POST /coupons"
        ) as resp:
            if resp.status_code == 201:
                self.code = payload["code"]
            else:
                resp.failure(f"Create coupon failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def validate_coupon(self):
        self.client.post(
            "/coupons/validate",
            json={"code": self.code, "orderAmount": round(random.uniform(20, 300), 2)},
            headers=self.state.headers,
            name="POST /coupons/validate",
        )

    @task
    def dashboard(self):
        self.client.get(
            "/analytics/dashboard",
            params={"timeframe": "week"},
            headers=self.state.headers,
            name="GET /analytics/dashboard",
        )

    @task
    def done(self):
        self.interrupt()
