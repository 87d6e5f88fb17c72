"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the domain's validation rules and
match the field names expected by the API's Pydantic request schemas.
Addresses and names use the ``es_MX`` locale so pricing exercises the
domestic VAT path; ``export_address`` covers zero-rated destinations.
"""

import json
import random
import uuid

from faker import Faker

fake = Faker("es_MX")

SEARCH_TERMS = ["alebrije", "rebozo", "talavera", "barro", "huipil", "copal", "plata", "textil"]
SORT_KEYS = ["newest", "price-asc", "price-desc", "name"]
STOREFRONT_PATHS = ["/productos", "/en/products", "/carrito", "/pago", "/categorias", "/en/cart", "/mis-pedidos"]


# ---------- Identity ----------


def valid_email() -> str:
    """Unique per call so registrations never collide across users."""
    local = fake.user_name()[:20]
    return f"{local}.{uuid.uuid4().hex[:6]}@example.mx"


def new_password() -> str:
    return f"lt-{uuid.uuid4().hex[:12]}"


def customer_registration() -> dict:
    return {"email": valid_email(), "name": fake.name()[:150], "password": new_password()}


def login_payload(kind: str, email: str, password: str) -> dict:
    return {"credentials": {"kind": kind, "email": email, "password": password}}


# ---------- Vendors & catalogue ----------


def vendor_registration() -> dict:
    """Generate RegisterVendorRequest payload."""
    return {
        "business_name": f"{fake.company()[:150]} {uuid.uuid4().hex[:4]}",
        "contact_name": fake.name()[:150],
        "email": valid_email(),
        "password": new_password(),
        "phone": fake.phone_number()[:30],
        "city": fake.city()[:100],
        "state": fake.state()[:100],
        "country": "MX",
    }


def product_data(category_id: str) -> dict:
    """Generate AddProductRequest payload."""
    craft = random.choice(SEARCH_TERMS).capitalize()
    return {
        "category_id": category_id,
        "name": f"{craft} {fake.word()} {uuid.uuid4().hex[:4]}"[:255],
        "description": fake.paragraph(nb_sentences=3),
        "price": round(random.uniform(80.0, 2500.0), 2),
        "stock": random.randint(20, 500),
    }


def image_url() -> str:
    return f"https://cdn.example.mx/lt/{uuid.uuid4().hex}.jpg"


def listing_params() -> dict:
    params = {"sort": random.choice(SORT_KEYS), "page": str(random.randint(1, 3))}
    if random.random() < 0.3:
        params["min_price"] = str(random.choice([100, 250, 500]))
    return params


def search_term() -> str:
    return random.choice(SEARCH_TERMS)


def storefront_path() -> str:
    return random.choice(STOREFRONT_PATHS)


# ---------- Checkout ----------


def shipping_address() -> dict:
    """Generate an AddressSchema payload for a domestic delivery."""
    return {
        "full_name": fake.name()[:150],
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state()[:100],
        "postal_code": fake.postcode()[:20],
        "country": "MX",
        "phone": fake.phone_number()[:30],
    }


def export_address() -> dict:
    address = shipping_address()
    address["country"] = random.choice(["US", "CA", "ES"])
    return address


def cart_items(products: list[dict], max_lines: int = 3) -> list[dict]:
    """Pick in-stock products from a listing page; quantities stay within stock."""
    in_stock = [p for p in products if p.get("stock", 0) > 0]
    chosen = random.sample(in_stock, k=min(len(in_stock), random.randint(1, max_lines)))
    return [{"product_id": p["id"], "quantity": random.randint(1, min(3, p["stock"]))} for p in chosen]


def checkout_request(items: list[dict], coupon_code: str | None = None, export: bool = False) -> dict:
    return {
        "items": items,
        "customer_email": valid_email(),
        "customer_name": fake.name()[:150],
        "shipping_address": export_address() if export else shipping_address(),
        "coupon_codes": [coupon_code] if coupon_code else [],
    }


def webhook_payload(checkout_id: str, event_type: str = "checkout.session.completed") -> str:
    """Serialized processor event as the fake gateway receives it."""
    obj = {
        "id": f"cs_fake_{uuid.uuid4().hex[:16]}",
        "object": "checkout.session",
        "payment_intent": f"pi_lt_{uuid.uuid4().hex[:16]}",
        "metadata": {"checkout_id": checkout_id},
    }
    if event_type == "payment_intent.payment_failed":
        obj["object"] = "payment_intent"
        obj["last_payment_error"] = {"message": "Your card was declined."}
    return json.dumps({"id": f"evt_{uuid.uuid4().hex[:16]}", "type": event_type, "data": {"object": obj}})
