"""Shared BDD fixtures and step definitions for vendor onboarding."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

from tianguis.notifications import get_email_channel
from tianguis.vendors.registration import RegisterVendor
from tianguis.vendors.review import ApproveVendor
from tianguis.vendors.vendor import Vendor


@pytest.fixture()
def error():
    return {"exc": None}


@given(parsers.parse('a vendor "{business_name}" has registered'), target_fixture="vendor_id")
def registered_vendor(business_name):
    return current_domain.process(
        RegisterVendor(
            business_name=business_name,
            contact_name="Rosa Hernández",
            email="rosa@textilesmixtecos.mx",
            password="telar-2024",
        ),
        asynchronous=False,
    )


@given("the vendor was approved")
def vendor_was_approved(vendor_id, admin):
    current_domain.process(ApproveVendor(vendor_id=vendor_id, reviewed_by=admin.id, notify=False), asynchronous=False)


@then(parsers.parse('the vendor status is "{status}"'))
def vendor_status_is(vendor_id, status):
    assert current_domain.repository_for(Vendor).get(vendor_id).status == status


@then(parsers.parse('the vendor receives an email with subject containing "{text}"'))
def email_subject_contains(text):
    outbox = get_email_channel().outbox
    assert len(outbox) == 1
    assert outbox[0]["to"] == "rosa@textilesmixtecos.mx"
    assert text in outbox[0]["subject"]


@then(parsers.parse('the vendor receives an email mentioning "{text}"'))
def email_body_contains(text):
    outbox = get_email_channel().outbox
    assert len(outbox) == 1
    assert text in outbox[0]["body"]


@then("no email is sent")
def no_email():
    assert get_email_channel().outbox == []


@then("the review is refused")
def review_refused(error):
    assert isinstance(error["exc"], ValidationError)
