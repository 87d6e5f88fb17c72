"""Checkout load test scenarios.

Guest shoppers go from a listing page to a paid checkout: coupon check,
hosted checkout session, processor webhook, then order lookup. Runs against
the fake gateway, which accepts webhooks signed ``test-signature``.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_items, checkout_request, webhook_payload
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState

FAKE_SIGNATURE_HEADERS = {"X-Gateway-Signature": "test-signature", "Content-Type": "application/json"}


class GuestCheckoutJourney(SequentialTaskSet):
    """Browse -> Validate coupon -> Start checkout -> Webhook -> Status -> Lookup.

    Each completed journey places one order per vendor in the cart and
    decrements stock for every line.
    """

    coupon_code: str | None = "BIENVENIDA10"
    event_type = "checkout.session.completed"
    deliveries = 1

    def on_start(self):
        self.state = ShopperState()

    @task
    def pick_products(self):
        with self.client.get(
            "/products",
            params={"limit": "24"},
            catch_response=True,
            name="GET /products",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Listing failed: {resp.status_code}")
                self.interrupt()
            self.state.listing = resp.json()["products"]

        self.state.items = cart_items(self.state.listing)
        if not self.state.items:
            self.interrupt()

    @task
    def validate_coupon(self):
        if not self.coupon_code:
            return
        with self.client.post(
            "/coupons/validate",
            json={"code": self.coupon_code, "items": self.state.items},
            catch_response=True,
            name="POST /coupons/validate",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Coupon check failed: {resp.status_code}")
            elif resp.json()["valid"]:
                self.state.coupon_code = self.coupon_code

    @task
    def start_checkout(self):
        payload = checkout_request(self.state.items, coupon_code=self.state.coupon_code)
        self.state.customer_email = payload["customer_email"]
        with self.client.post(
            "/checkout/sessions",
            json=payload,
            catch_response=True,
            name="POST /checkout/sessions",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.checkout_id = body["checkout_id"]
                self.state.expected_total = body["breakdown"]["total"]
            elif resp.status_code == 400:
                # Stock sold out under concurrent load; an expected outcome
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def deliver_webhook(self):
        payload = webhook_payload(self.state.checkout_id, self.event_type)
        for _ in range(self.deliveries):
            with self.client.post(
                "/payments/webhook",
                data=payload,
                headers=FAKE_SIGNATURE_HEADERS,
                catch_response=True,
                name=f"POST /payments/webhook ({self.event_type})",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Webhook failed: {resp.status_code}: {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def check_status(self):
        with self.client.get(
            f"/checkout/sessions/{self.state.checkout_id}",
            catch_response=True,
            name="GET /checkout/sessions/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Status failed: {resp.status_code}")
                return
            body = resp.json()
            self.state.order_numbers = body["order_numbers"]
            if abs(body["total"] - self.state.expected_total) > 0.005:
                resp.failure(f"Charged {body['total']} but quoted {self.state.expected_total}")

    @task
    def lookup_order(self):
        for number in self.state.order_numbers[:1]:
            with self.client.post(
                "/orders/lookup",
                json={"email": self.state.customer_email, "order_number": number},
                catch_response=True,
                name="POST /orders/lookup",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Lookup failed: {resp.status_code}")

    @task
    def done(self):
        self.interrupt()


class DeclinedCheckoutJourney(GuestCheckoutJourney):
    """Same path with a declined payment; no orders are placed."""

    coupon_code = None
    event_type = "payment_intent.payment_failed"


class DuplicateWebhookJourney(GuestCheckoutJourney):
    """Processor retries the completion webhook; orders must not duplicate."""

    coupon_code = None
    deliveries = 2


class ShopperUser(HttpUser):
    """Guest shoppers completing checkouts."""

    wait_time = between(1.0, 4.0)
    tasks = {GuestCheckoutJourney: 6, DeclinedCheckoutJourney: 2, DuplicateWebhookJourney: 1}
