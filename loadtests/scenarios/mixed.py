"""Mixed marketplace workload scenario.

Combines browsing, checkout and vendor journeys with weights that model a
marketplace where most visitors browse, some buy and a few sell. This is the
recommended scenario for a load baseline.
"""

from locust import HttpUser, between

from loadtests.scenarios.checkout import DeclinedCheckoutJourney, DuplicateWebhookJourney, GuestCheckoutJourney
from loadtests.scenarios.storefront import BrowseJourney
from loadtests.scenarios.vendors import AdminDashboardJourney, VendorOnboardingJourney


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload.

    Browsing (65%): listings, search, product pages and locale routes.

    Checkout (30%):
    - Paid guest checkout: the conversion path
    - Declined payment: the session fails and nothing is placed
    - Retried webhook: exercises confirmation idempotency

    Selling (5%):
    - Vendor onboarding through to an approved listing
    - Admin back office reads
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        BrowseJourney: 65,
        GuestCheckoutJourney: 22,
        DeclinedCheckoutJourney: 5,
        DuplicateWebhookJourney: 3,
        VendorOnboardingJourney: 3,
        AdminDashboardJourney: 2,
    }
