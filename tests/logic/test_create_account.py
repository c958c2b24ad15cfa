"""Tests for account signup."""

import pytest

from onetime.platform.exceptions import FormError, LimitExceeded, Redirect
from onetime.platform.logic import CreateAccount
from onetime.platform.models import Customer

pytestmark = pytest.mark.asyncio


def _params(**overrides):
    params = {"u": "new@example.com", "p": "correct horse", "planid": "basic"}
    params.update(overrides)
    return params


async def test_creates_verified_customer(make_context, services, redis):
    context = await make_context()
    data = await CreateAccount(context, _params(), services).run()

    assert data["custid"] == "new@example.com"
    assert data["details"]["message"] == "Account created."
    assert "passphrase" not in data["record"]

    cust = await Customer.load(redis, "new@example.com")
    assert cust.verified is True
    assert cust.role == "customer"
    assert cust.passphrase_matches("correct horse")
    assert context.sess.is_authenticated()


async def test_without_autoverify_session_waits(make_context, services, redis):
    services.settings.site.autoverify = False
    context = await make_context()
    data = await CreateAccount(context, _params(), services).run()

    assert data["details"]["message"] == "A verification was sent to new@example.com."
    assert (await Customer.load(redis, "new@example.com")).verified is False
    assert context.sess.custid == "new@example.com"
    assert not context.sess.is_authenticated()


async def test_colonel_role(make_context, services, redis):
    context = await make_context()
    await CreateAccount(context, _params(u="Admin@Example.com"), services).run()
    assert (await Customer.load(redis, "admin@example.com")).is_colonel()


async def test_unknown_plan_becomes_basic(make_context, services, redis):
    context = await make_context()
    await CreateAccount(context, _params(planid="platinum"), services).run()
    assert (await Customer.load(redis, "new@example.com")).planid == "basic"


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"u": "not-an-email"}, "Is that a valid email address?"),
        ({"p": "abc"}, "Password is too short"),
    ],
)
async def test_form_errors(make_context, services, overrides, message):
    context = await make_context()
    with pytest.raises(FormError) as exc_info:
        await CreateAccount(context, _params(**overrides), services).run()
    assert exc_info.value.message == message
    assert exc_info.value.form_fields["planid"] == "basic"


async def test_existing_customer(make_context, services, redis):
    await Customer.create(redis, "new@example.com")
    context = await make_context()
    with pytest.raises(FormError, match="Please try another email address"):
        await CreateAccount(context, _params(), services).run()


async def test_already_signed_in(make_context, services):
    context = await make_context("someone@example.com")
    with pytest.raises(FormError, match="You're already signed up"):
        await CreateAccount(context, _params(), services).run()


async def test_filled_honeypot_redirects_without_creating(make_context, services, redis):
    context = await make_context()
    with pytest.raises(Redirect) as exc_info:
        await CreateAccount(context, _params(skill="robot"), services).run()
    assert exc_info.value.location == "/?s=1"
    assert await Customer.load(redis, "new@example.com") is None


async def test_rate_limited_before_validation(make_context, services, redis):
    """The limit is counted even for requests that fail validation."""
    context = await make_context()
    for _ in range(3):
        with pytest.raises(FormError):
            await CreateAccount(context, _params(u="bogus"), services).run()

    with pytest.raises(LimitExceeded) as exc_info:
        await CreateAccount(context, _params(), services).run()

    assert exc_info.value.event == "create_account"
    assert exc_info.value.count == 4
    assert exc_info.value.identifier == context.subject
    assert await Customer.load(redis, "new@example.com") is None
