"""Storefront browsing load test scenarios.

Read-heavy traffic: listings, search, product pages, categories and locale
route resolution. Browsing never writes, so these journeys can run at much
higher concurrency than checkout.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import listing_params, search_term, storefront_path
from loadtests.helpers.response import extract_error_detail


class BrowseJourney(SequentialTaskSet):
    """Home listing -> Category -> Search -> Product page -> Locale resolve."""

    def on_start(self):
        self.products: list[dict] = []
        self.category_ids: list[str] = []

    @task
    def list_products(self):
        with self.client.get(
            "/products",
            params=listing_params(),
            catch_response=True,
            name="GET /products",
        ) as resp:
            if resp.status_code == 200:
                self.products = resp.json()["products"]
            else:
                resp.failure(f"Listing failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def browse_category(self):
        with self.client.get("/categories", catch_response=True, name="GET /categories") as resp:
            if resp.status_code != 200:
                resp.failure(f"Categories failed: {resp.status_code}")
                return
            self.category_ids = [c["id"] for c in resp.json()]

        if self.category_ids:
            self.client.get(
                "/products",
                params={"category_ids": random.choice(self.category_ids)},
                name="GET /products?category_ids",
            )

    @task
    def search(self):
        with self.client.get(
            "/products/search",
            params={"q": search_term()},
            catch_response=True,
            name="GET /products/search",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Search failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def view_product(self):
        if not self.products:
            return
        product = random.choice(self.products)
        with self.client.get(
            f"/products/{product['id']}",
            catch_response=True,
            name="GET /products/{id}",
        ) as resp:
            # A product can be delisted between the listing and the detail view
            if resp.status_code not in (200, 404):
                resp.failure(f"Product page failed: {resp.status_code}")

    @task
    def resolve_route(self):
        self.client.get("/i18n/resolve", params={"path": storefront_path()}, name="GET /i18n/resolve")

    @task
    def done(self):
        self.interrupt()


class StorefrontUser(HttpUser):
    """Anonymous visitors browsing the catalog."""

    wait_time = between(0.5, 2.0)
    tasks = [BrowseJourney]
