"""Vendor and back office load test scenarios.

A vendor applies, an admin approves it, the vendor lists a product and the
admin approves the listing. Admin credentials come from
``LOADTEST_ADMIN_EMAIL`` / ``LOADTEST_ADMIN_PASSWORD`` and default to the
account created by ``manage.py seed``.
"""

import os
import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import image_url, login_payload, product_data, vendor_registration
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import AdminSession, VendorState

ADMIN_EMAIL = os.getenv("LOADTEST_ADMIN_EMAIL", "admin@tianguis.mx")
ADMIN_PASSWORD = os.getenv("LOADTEST_ADMIN_PASSWORD", "change-me-now")


def _login(client, kind, email, password) -> str | None:
    with client.post(
        "/auth/login",
        json=login_payload(kind, email, password),
        catch_response=True,
        name=f"POST /auth/login ({kind})",
    ) as resp:
        if resp.status_code != 200:
            resp.failure(f"{kind} login failed: {resp.status_code}: {extract_error_detail(resp)}")
            return None
        return resp.json()["access_token"]


class VendorOnboardingJourney(SequentialTaskSet):
    """Apply -> Admin approves -> Vendor lists product -> Admin approves listing."""

    def on_start(self):
        self.state = VendorState()
        self.admin = AdminSession()

    @task
    def apply(self):
        payload = vendor_registration()
        self.state.email = payload["email"]
        self.state.password = payload["password"]
        with self.client.post(
            "/vendors/register",
            json=payload,
            catch_response=True,
            name="POST /vendors/register",
        ) as resp:
            if resp.status_code == 201:
                self.state.vendor_id = resp.json()["vendor_id"]
            else:
                resp.failure(f"Vendor registration failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def admin_approves_vendor(self):
        self.admin.token = _login(self.client, "admin", ADMIN_EMAIL, ADMIN_PASSWORD)
        if not self.admin.token:
            self.interrupt()
        with self.client.post(
            f"/admin/vendors/{self.state.vendor_id}/approve",
            json={"notify": True},
            headers=self.admin.headers,
            catch_response=True,
            name="POST /admin/vendors/{id}/approve",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Approval failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def vendor_signs_in(self):
        self.state.token = _login(self.client, "vendor", self.state.email, self.state.password)
        if not self.state.token:
            self.interrupt()

    @task
    def list_product(self):
        categories = self.client.get("/categories", name="GET /categories").json()
        if not categories:
            self.interrupt()
        self.state.category_id = random.choice(categories)["id"]

        with self.client.post(
            "/vendor/products",
            json=product_data(self.state.category_id),
            headers=self.state.headers,
            catch_response=True,
            name="POST /vendor/products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_ids.append(resp.json()["product_id"])
            else:
                resp.failure(f"Add product failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_image(self):
        product_id = self.state.product_ids[-1]
        self.client.post(
            f"/vendor/products/{product_id}/images",
            json={"url": image_url()},
            headers=self.state.headers,
            name="POST /vendor/products/{id}/images",
        )

    @task
    def admin_approves_listing(self):
        product_id = self.state.product_ids[-1]
        with self.client.post(
            f"/admin/products/{product_id}/approve",
            json={},
            headers=self.admin.headers,
            catch_response=True,
            name="POST /admin/products/{id}/approve",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Listing approval failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def check_orders(self):
        self.client.get("/vendor/orders", headers=self.state.headers, name="GET /vendor/orders")

    @task
    def done(self):
        self.interrupt()


class AdminDashboardJourney(SequentialTaskSet):
    """Sign in -> Moderation queues -> Orders -> Audit log."""

    def on_start(self):
        self.admin = AdminSession()

    @task
    def sign_in(self):
        self.admin.token = _login(self.client, "admin", ADMIN_EMAIL, ADMIN_PASSWORD)
        if not self.admin.token:
            self.interrupt()

    @task
    def queues(self):
        self.client.get(
            "/admin/vendors",
            params={"status": "pending"},
            headers=self.admin.headers,
            name="GET /admin/vendors",
        )
        self.client.get("/admin/products", headers=self.admin.headers, name="GET /admin/products")
        self.client.get("/admin/images", headers=self.admin.headers, name="GET /admin/images")

    @task
    def orders(self):
        self.client.get("/admin/orders", headers=self.admin.headers, name="GET /admin/orders")

    @task
    def audit_log(self):
        self.client.get(
            "/admin/audit-logs",
            params={"category": random.choice(["order", "vendor", "product", "auth"]), "limit": "50"},
            headers=self.admin.headers,
            name="GET /admin/audit-logs",
        )

    @task
    def done(self):
        self.interrupt()


class VendorUser(HttpUser):
    """Vendors onboarding and admins working the back office."""

    wait_time = between(2.0, 6.0)
    tasks = {VendorOnboardingJourney: 3, AdminDashboardJourney: 1}
