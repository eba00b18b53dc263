"""
Step definitions for submitting updates through the service.
"""

from unittest.mock import Mock, patch

import dns.exception
import dns.name
import dns.rcode
from behave import given, when, then

from ddns_updater.core.service import DDNSService
from ddns_updater.utils.config import get_default_config, merge_config


def _patch_tcp(context, **kwargs):
    patcher = patch("dns.query.tcp", **kwargs)
    context.mock_tcp = patcher.start()
    context.patchers.append(patcher)


@given('a DDNS service for zone "{zone}" on server "{server}" with the signing key')
def step_impl(context, zone, server):
    """Set up the service with the test signing key."""
    context.ddns_config = merge_config(
        get_default_config(),
        {
            "zone": zone,
            "server": {"host": server},
            "signing_key": {"file": str(context.key_file), "name": "update-key"},
        },
    )
    context.service = DDNSService(context.ddns_config)


@given('the server answers "{rcode}"')
def step_impl(context, rcode):
    """Make the server respond with the given rcode."""
    response = Mock()
    response.rcode.return_value = dns.rcode.from_text(rcode)
    _patch_tcp(context, return_value=response)


@given("the server does not answer within {seconds:d} seconds")
def step_impl(context, seconds):
    """Make the exchange time out."""
    context.service.timeout = float(seconds)
    _patch_tcp(context, side_effect=dns.exception.Timeout())


@given("the server refuses connections")
def step_impl(context):
    """Make the connection fail."""
    _patch_tcp(context, side_effect=ConnectionRefusedError(111, "Connection refused"))


@when('I add a record "{name}" of type "{record_type}" with value "{value}"')
def step_impl(context, name, record_type, value):
    """Add a record through the service."""
    context.result = context.service.add_record(name, record_type, value)


@then('the update succeeds with message "{message}"')
def step_impl(context, message):
    """Verify the update was acknowledged."""
    assert context.result.ok, f"Update failed: {context.result.error}"
    assert context.result.to_dict()["message"] == message


@then('the update was signed with key "{key_name}"')
def step_impl(context, key_name):
    """Verify the message sent carried the TSIG key."""
    update = context.mock_tcp.call_args[0][0]
    assert update.keyname == dns.name.from_text(key_name)
    assert context.result.ack.signed


@then('the update fails with "{error}" and status {status:d}')
def step_impl(context, error, status):
    """Verify the error kind and its status."""
    assert not context.result.ok, "Update unexpectedly succeeded"
    actual = type(context.result.error).__name__
    assert actual == error, f"Expected {error}, got {actual}"
    assert context.result.status == status, f"Expected {status}, got {context.result.status}"


@then("the error is retryable")
def step_impl(context):
    """Verify the caller may retry."""
    assert context.result.retryable


@then("the error is not retryable")
def step_impl(context):
    """Verify the caller should not retry."""
    assert not context.result.retryable


@then("the transport waited at most {seconds:d} seconds")
def step_impl(context, seconds):
    """Verify the timeout handed to dnspython."""
    assert context.mock_tcp.call_args[1]["timeout"] == seconds


@then("nothing was sent to the server")
def step_impl(context):
    """Verify validation stopped the update before the network."""
    context.mock_tcp.assert_not_called()
