"""End-to-end tests for the Crisp receiver endpoint."""

from pathlib import Path

import pytest

from conftest import DEFAULT_SECRET, IT_SECRET

RESOURCES_DIR = Path(__file__).resolve().parent / "resources" / "request_bodies"
CRISP_URL = f"/webhooks/incoming/crisp?key={DEFAULT_SECRET}"


def load_body(name: str) -> bytes:
    return (RESOURCES_DIR / name).read_bytes()


@pytest.mark.asyncio
async def test_home_page_is_not_found(client):
    response = await client.get("/")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH"])
async def test_non_post_is_not_allowed(client, method):
    response = await client.request(method, CRISP_URL)
    assert response.status_code == 405
    assert response.text == f"The 'crisp' WebHook receiver does not support the HTTP '{method}' method."


@pytest.mark.asyncio
async def test_head_is_not_allowed(client):
    response = await client.head(CRISP_URL)
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_no_key_is_bad_request(client):
    response = await client.post("/webhooks/incoming/crisp", content=b"")
    assert response.status_code == 400
    assert response.text == "A 'crisp' WebHook request must contain a 'key' query parameter."


@pytest.mark.asyncio
async def test_empty_key_is_bad_request(client):
    response = await client.post("/webhooks/incoming/crisp?key=", content=b"")
    assert response.status_code == 400
    assert response.text == "A 'crisp' WebHook request must contain a 'key' query parameter."


@pytest.mark.asyncio
async def test_wrong_key_is_bad_request(client):
    # One changed character in the key query parameter.
    response = await client.post(
        "/webhooks/incoming/crisp?key=01234567890123456789012345678902",
        content=b"",
    )
    assert response.status_code == 400
    assert response.text == "The 'key' query parameter provided in the HTTP request did not match the expected value."


@pytest.mark.asyncio
async def test_wrong_key_of_different_length_is_bad_request(client):
    response = await client.post("/webhooks/incoming/crisp?key=short", content=b"")
    assert response.status_code == 400
    assert response.text == "The 'key' query parameter provided in the HTTP request did not match the expected value."


@pytest.mark.asyncio
async def test_unknown_receiver_id_is_not_found_with_empty_body(client):
    response = await client.post(f"/webhooks/incoming/crisp/marketing?key={DEFAULT_SECRET}", content=b"")
    assert response.status_code == 404
    assert response.content == b""


@pytest.mark.asyncio
async def test_unknown_receiver_name_is_not_found(client):
    response = await client.post(f"/webhooks/incoming/intercom?key={DEFAULT_SECRET}", content=b"")
    assert response.status_code == 404
    assert response.content == b""


@pytest.mark.asyncio
async def test_no_body_is_bad_request(client):
    response = await client.post(CRISP_URL, content=b"")
    assert response.status_code == 400
    assert response.text == "The 'crisp' WebHook receiver does not support an empty request body."


@pytest.mark.asyncio
async def test_with_body_succeeds(client):
    response = await client.post(
        CRISP_URL,
        content=load_body("crisp.json"),
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 200
    assert response.content == b""
    assert "X-Trace-Id" in response.headers


@pytest.mark.asyncio
async def test_receiver_name_is_case_insensitive(client):
    response = await client.post(
        f"/webhooks/incoming/CRISP?key={DEFAULT_SECRET}",
        content=load_body("crisp.json"),
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_named_receiver_id_uses_its_own_secret(client):
    body = load_body("crisp.json")
    headers = {"Content-Type": "application/json"}

    ok = await client.post(f"/webhooks/incoming/crisp/it?key={IT_SECRET}", content=body, headers=headers)
    assert ok.status_code == 200

    # The default secret is not valid for the "It" id.
    wrong = await client.post(f"/webhooks/incoming/crisp/It?key={DEFAULT_SECRET}", content=body, headers=headers)
    assert wrong.status_code == 400


@pytest.mark.asyncio
async def test_receiver_id_in_query_string_is_ignored(client):
    response = await client.post(
        f"/webhooks/incoming/crisp?key={IT_SECRET}&receiver_id=It",
        content=load_body("crisp.json"),
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_missing_event_is_bad_request(client):
    response = await client.post(
        CRISP_URL,
        json={"website_id": "42286ab3-b29a-4fde-8538-da0ae501d825", "data": {}},
    )
    assert response.status_code == 400
    assert response.text == "The 'crisp' WebHook receiver does not support an invalid request body."


@pytest.mark.asyncio
async def test_malformed_json_is_bad_request(client):
    response = await client.post(
        CRISP_URL,
        content=b'{"event": "message:send"',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.text == "The 'crisp' WebHook receiver does not support an invalid request body."


@pytest.mark.asyncio
async def test_non_json_content_type_is_unsupported(client):
    response = await client.post(
        CRISP_URL,
        content=b"event=message%3Asend",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 415
    assert response.text == (
        "The 'crisp' WebHook receiver does not support content type 'application/x-www-form-urlencoded'."
    )


@pytest.mark.asyncio
async def test_invalid_payload_field_is_bad_request(client):
    response = await client.post(CRISP_URL, json={"event": "message:send", "data": "not-an-object"})
    assert response.status_code == 400
    assert response.text.startswith("The 'crisp' WebHook request body is not valid: data:")


@pytest.mark.asyncio
async def test_plain_http_is_forbidden(app):
    from httpx import ASGITransport, AsyncClient

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as plain:
        response = await plain.post(CRISP_URL, json={"event": "message:send"})
    assert response.status_code == 403
    assert response.text == (
        "The WebHook receiver 'crisp' requires HTTPS in order to be secure. "
        "Please register a WebHook URI of type 'https'."
    )


@pytest.mark.asyncio
async def test_plain_http_is_allowed_in_local_mode(settings):
    from httpx import ASGITransport, AsyncClient

    from crisp_webhooks.main import create_app

    local_app = create_app(settings=settings.model_copy(update={"local_mode": True}))
    async with AsyncClient(transport=ASGITransport(app=local_app), base_url="http://test") as plain:
        response = await plain.post(CRISP_URL, json={"event": "message:send"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_same_request_is_admitted_twice(client):
    body = load_body("crisp.json")
    headers = {"Content-Type": "application/json"}
    first = await client.post(CRISP_URL, content=body, headers=headers)
    second = await client.post(CRISP_URL, content=body, headers=headers)
    assert first.status_code == second.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["TRACE", "PROPFIND", "MKCOL"])
async def test_unlisted_methods_get_receiver_message(client, method):
    response = await client.request(method, CRISP_URL)
    assert response.status_code == 405
    assert response.text == f"The 'crisp' WebHook receiver does not support the HTTP '{method}' method."
    assert "POST" in response.headers["allow"]


@pytest.mark.asyncio
async def test_unlisted_method_on_unknown_receiver_is_not_found(client):
    response = await client.request("TRACE", f"/webhooks/incoming/intercom?key={DEFAULT_SECRET}")
    assert response.status_code == 404
    assert response.content == b""


@pytest.mark.asyncio
async def test_repeated_key_parameter_is_rejected(client):
    response = await client.post(
        f"/webhooks/incoming/crisp?key={'w' * 32}&key={DEFAULT_SECRET}",
        content=load_body("crisp.json"),
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.text == "The 'key' query parameter provided in the HTTP request did not match the expected value."


@pytest.mark.asyncio
async def test_key_parameter_name_is_case_insensitive(client):
    response = await client.post(
        f"/webhooks/incoming/crisp?Key={DEFAULT_SECRET}",
        content=load_body("crisp.json"),
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    [
        f"/webhooks/incoming/crisp/?key={DEFAULT_SECRET}",
        f"/webhooks/incoming/crisp/It/?key={IT_SECRET}",
    ],
)
async def test_trailing_slash_is_served_without_redirect(client, url):
    response = await client.post(url, content=load_body("crisp.json"), headers={"Content-Type": "application/json"})
    assert response.status_code == 200
    assert response.content == b""
