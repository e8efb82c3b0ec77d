from skillpack.skills import email_validator
from tests.helpers import StubClient, ctx


async def test_validate_email():
    client = StubClient(default={"valid": True})
    res = await email_validator.execute({"action": "validate_email", "email": "Ann@Example.com"}, ctx(client))
    assert client.last["body"] == {"email": "ann@example.com"}
    assert res["result"] == "ann@example.com: valid (deliverable)"


async def test_bad_syntax_never_calls_provider():
    client = StubClient()
    res = await email_validator.execute({"action": "validate_email", "email": "not-an-email"}, ctx(client))
    assert res["metadata"]["error"]["code"] == "INVALID_INPUT"
    assert client.calls == []


async def test_bulk_validate_keeps_syntax_failures_local():
    client = StubClient(default={"results": [{"email": "a@b.io", "valid": True}]})
    res = await email_validator.execute({"action": "bulk_validate", "emails": "a@b.io; nope"}, ctx(client))
    assert client.last["body"] == {"emails": ["a@b.io"]}
    assert "nope: invalid (syntax)" in res["result"]
    meta = res["metadata"]
    assert (meta["total"], meta["valid"], meta["invalid"]) == (2, 1, 1)


def test_bulk_limit_and_domain():
    emails = ",".join(f"u{i}@x.io" for i in range(101))
    assert email_validator.validate({"action": "bulk_validate", "emails": emails})["valid"] is False
    assert email_validator.validate({"action": "check_domain", "domain": "bad_domain"})["valid"] is False


async def test_suggestions():
    client = StubClient(default={"suggestions": ["joe@gmail.com"]})
    res = await email_validator.execute({"action": "get_suggestions", "email": "joe@gmial.com"}, ctx(client))
    assert res["result"] == "Did you mean: joe@gmail.com?"


async def test_bulk_validate_needs_an_address():
    client = StubClient()
    res = await email_validator.execute({"action": "bulk_validate", "emails": ", ;"}, ctx(client))
    assert res["metadata"]["error"]["code"] == "INVALID_INPUT"
    assert client.calls == []
