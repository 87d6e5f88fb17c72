"""BDD tests for multi-vendor checkout."""

from pytest_bdd import scenarios

scenarios("features/checkout.feature")
