"""Tianguis load testing entry point for Locust.

Discovers the user classes from the scenarios package. Run specific
scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Mixed workload only:
    locust -f loadtests/locustfile.py MixedWorkloadUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py MixedWorkloadUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest

The target must run the fake payment gateway (no ``STRIPE_SECRET_KEY``) and
be seeded with ``python src/manage.py seed`` so that categories, products and
the admin account exist.
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.checkout import ShopperUser  # noqa: F401
from loadtests.scenarios.mixed import MixedWorkloadUser  # noqa: F401
from loadtests.scenarios.storefront import StorefrontUser  # noqa: F401
from loadtests.scenarios.vendors import VendorUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Extracts the API error body so the log shows "Insufficient stock for ..."
    instead of just "400".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when the load test begins and check the target is up."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    if environment.host:
        try:
            health = requests.get(f"{environment.host}/health", timeout=5).json()
            print(f"[LOADTEST] Target health: {health}")
        except (requests.RequestException, ValueError) as e:
            print(f"[LOADTEST] Target health check failed: {e}")
    print()


@events.test_stop.add_listener
def on_test_stop(**_kwargs):
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}\n")
