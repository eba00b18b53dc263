"""
Step definitions for building update transactions.
"""

from behave import given, when, then

from ddns_updater.core.errors import ValidationError
from ddns_updater.core.transaction import UpdateTransactionBuilder, parse_transaction


def _build(context, name, record_type, value, ttl=None):
    context.build_args = (name, record_type, value, ttl)
    try:
        context.transaction = context.builder.build(name, record_type, value, ttl)
        context.build_error = None
    except ValidationError as e:
        context.transaction = None
        context.build_error = e


@given('an update builder for zone "{zone}"')
def step_impl(context, zone):
    """Set up a builder for the zone on the default server."""
    context.builder = UpdateTransactionBuilder(zone=zone)


@when('I build a record "{name}" of type "{record_type}" with value "{value}" and TTL {ttl:d}')
def step_impl(context, name, record_type, value, ttl):
    """Build a transaction with an explicit TTL."""
    _build(context, name, record_type, value, ttl)


@when('I build a record "{name}" of type "{record_type}" with value "{value}"')
def step_impl(context, name, record_type, value):
    """Build a transaction with the default TTL."""
    _build(context, name, record_type, value)


@when('I build a TXT record "{value}" with an empty name')
def step_impl(context, value):
    """Build a TXT transaction without a name."""
    _build(context, "", "TXT", value)


@when('I build a TXT record "{name}" with the value:')
def step_impl(context, name):
    """Build a TXT transaction whose value is the step's text block."""
    _build(context, name, "TXT", context.text)


@then("the build succeeds")
def step_impl(context):
    """Verify a transaction was built."""
    assert context.build_error is None, f"Build failed: {context.build_error}"
    assert context.transaction is not None


@then('the build fails with "{error}"')
def step_impl(context, error):
    """Verify the build raised the named validation error."""
    assert context.transaction is None, "Build unexpectedly succeeded"
    actual = type(context.build_error).__name__
    assert actual == error, f"Expected {error}, got {actual}"


@then('the rendered update line is "{line}"')
def step_impl(context, line):
    """Verify the update line of the rendered transaction."""
    rendered = context.transaction.render().splitlines()[2]
    assert rendered == line, f"Expected {line!r}, got {rendered!r}"


@then("the rendered transaction parses back to the same transaction")
def step_impl(context):
    """Verify the rendered text round-trips."""
    parsed = parse_transaction(context.transaction.render())
    assert parsed == context.transaction, f"{parsed} != {context.transaction}"


@then('the rendered transaction has {count:d} lines ending with "{last}"')
def step_impl(context, count, last):
    """Verify the transaction structure was not altered by the value."""
    lines = context.transaction.render().splitlines()
    assert len(lines) == count, f"Expected {count} lines, got {lines}"
    assert lines[-1] == last, f"Last line is {lines[-1]!r}"


@then("every quote and semicolon in the rendered TXT data is escaped")
def step_impl(context):
    """Verify no quote or semicolon inside the TXT string is bare."""
    rdata_text = context.transaction.rdata_text
    assert rdata_text.startswith('"') and rdata_text.endswith('"')
    inner = rdata_text[1:-1]
    i = 0
    while i < len(inner):
        if inner[i] == "\\":
            i += 2
            continue
        assert inner[i] not in '";', f"Unescaped {inner[i]!r} in {rdata_text}"
        i += 1


@then("building it again gives an equal transaction")
def step_impl(context):
    """Verify identical inputs give structurally identical transactions."""
    again = context.builder.build(*context.build_args)
    assert again == context.transaction
    assert again.render() == context.transaction.render()
