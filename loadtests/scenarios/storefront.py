"""Shopper journeys: browse, fill a cart, apply discounts and check out.

Each journey is a SequentialTaskSet; a step that fails interrupts the
journey because later steps depend on it.
"""

import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import address_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState


class _ShopperJourney(SequentialTaskSet):
    def on_start(self):
        self.state = ShopperState()

    def _fail(self, resp, what):
        resp.failure(f"{what} failed: {resp.status_code} {extract_error_detail(resp)}")
        self.interrupt()

    @task
    def browse(self):
        with self.client.get(
            "/products",
            params={"inStock": "true", "limit": 50},
            catch_response=True,
            name="GET /products",
        ) as resp:
            products = resp.json()["data"] if resp.status_code == 200 else []
            if not products:
                resp.failure("No products in stock to shop")
                self.interrupt()
            self.state.product_ids = [p["id"] for p in random.sample(products, min(3, len(products)))]

    @task
    def fill_cart(self):
        for product_id in self.state.product_ids:
            with self.client.post(
                "/cart/add",
                json={"productId": product_id, "quantity": random.randint(1, 3)},
                headers=self.state.headers,
                catch_response=True,
                name="POST /cart/add",
            ) as resp:
                if resp.status_code != 201:
                    self._fail(resp, "Add to cart")


class BrowseAndCheckoutJourney(_ShopperJourney):
    """Browse -> Add bottles -> Save address -> Check out -> Pay."""

    @task
    def save_address(self):
        with self.client.post(
            "/shipments",
            json=address_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /shipments",
        ) as resp:
            if resp.status_code != 201:
                self._fail(resp, "Save address")

    @task
    def check_out(self):
        with self.client.post(
            "/orders",
            json={"note": "Load test order"},
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["data"]["id"]
            else:
                self._fail(resp, "Checkout")

    @task
    def pay(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/purchase",
            json={"paymentMethod": random.choice(["stripe", "cash_on_delivery"])},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /orders/{id}/purchase",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Payment failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class AbandonedCartJourney(_ShopperJourney):
    """Browse -> Add bottles -> Check the best offer -> Leave."""

    @task
    def best_offer(self):
        self.client.get("/promotions/best", headers=self.state.headers, name="GET /promotions/best")

    @task
    def look_at_flash_sales(self):
        self.client.get("/flash-sales/active", name="GET /flash-sales/active")

    @task
    def done(self):
        self.interrupt()
