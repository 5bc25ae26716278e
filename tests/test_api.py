import json

import httpx
import pytest

from tests.stubs import api_client, customers_page, killboard_node, make_settings

GID = "gid://shopify/Customer/987"


def _update_body(**overrides):
    body = {
        "customerId": "987",
        "metafields": [
            {"key": "xp", "value": 1500, "type": "number_integer"},
            {"key": "tier", "value": "Ace"},
            {"key": "is_pro", "value": True, "type": "boolean"},
            {"key": "achievements", "value": [{"id": "first-blood"}], "type": "json"},
        ],
    }
    body.update(overrides)
    return body


def _update_ok(customer_id=GID):
    return {"customerUpdate": {"customer": {"id": customer_id}, "userErrors": []}}


@pytest.mark.anyio
async def test_health(client, shopify):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.text == "OK"
    assert response.headers["content-type"].startswith("text/plain")
    assert shopify.requests == []


@pytest.mark.anyio
async def test_killboard_sorted_by_victories_then_xp(client, shopify):
    shopify.queue_data(
        customers_page(
            killboard_node(1, username="Goose", xp="900", victories="2"),
            killboard_node(2, username="Maverick", xp="500", victories="7", country="USA", avatar="https://i.ibb.co/m.png"),
            killboard_node(3, username="Iceman", xp="1200", victories="7"),
            killboard_node(4, xp="50"),
        )
    )

    response = await client.get("/apps/killboard")

    assert response.status_code == 200
    payload = response.json()
    assert [entry["name"] for entry in payload] == ["Iceman", "Maverick", "Goose", "Unnamed Pilot"]
    maverick = payload[1]
    assert maverick == {
        "id": "gid://shopify/Customer/2",
        "name": "Maverick",
        "level": 1,
        "xp": 500,
        "victories": 7,
        "tier": "Recruit",
        "country": "USA",
        "avatar": "https://i.ibb.co/m.png",
    }
    assert shopify.json_bodies()[0]["variables"] == {"first": 100}


@pytest.mark.anyio
async def test_killboard_empty(client, shopify):
    shopify.queue_data(customers_page())

    response = await client.get("/apps/killboard")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.anyio
async def test_killboard_upstream_error(client, shopify):
    shopify.queue(httpx.Response(200, json={"errors": [{"message": "Access denied for customers field."}]}))

    response = await client.get("/apps/killboard")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to fetch killboard data."
    assert "Access denied" in body["details"]


@pytest.mark.anyio
async def test_garage_data_requires_customer_id(client, shopify):
    response = await client.get("/apps/garage-data")

    assert response.status_code == 400
    assert response.json() == {"error": "Customer ID is required."}
    assert shopify.requests == []


@pytest.mark.anyio
async def test_garage_data_rejects_malformed_id(client, shopify):
    response = await client.get("/apps/garage-data", params={"customerId": "not-an-id"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid customer ID."
    assert shopify.requests == []


@pytest.mark.anyio
async def test_garage_data_defaults_when_no_metafields(client, shopify):
    shopify.queue_data(
        {"customer": {"id": GID, "displayName": "", "firstName": None, "lastName": None, "metafields": {"edges": []}}}
    )

    response = await client.get("/apps/garage-data", params={"customerId": "987"})

    assert response.status_code == 200
    assert response.json() == {
        "id": GID,
        "name": "Unnamed Pilot",
        "level": 1,
        "xp": 0,
        "victories": 0,
        "tier": "Recruit",
        "country": "Unknown",
        "faction": "Independent",
        "avatar_url": "",
        "car_image_url": "",
        "achievements": [],
    }
    assert shopify.json_bodies()[0]["variables"] == {"id": GID}


@pytest.mark.anyio
async def test_garage_data_normalizes_metafields(client, shopify):
    achievements = [{"id": "first-blood"}, {"id": "ace", "count": 2}]
    shopify.queue_data(
        {
            "customer": {
                "id": GID,
                "displayName": "Pete Mitchell",
                "firstName": "Pete",
                "lastName": "Mitchell",
                "metafields": {
                    "edges": [
                        {"node": {"key": "xp", "value": "2500", "type": "number_integer"}},
                        {"node": {"key": "victories", "value": "oops", "type": "single_line_text_field"}},
                        {"node": {"key": "achievements", "value": json.dumps(achievements), "type": "json"}},
                        {"node": {"key": "paint", "value": "crimson", "type": "single_line_text_field"}},
                    ]
                },
            }
        }
    )

    response = await client.get("/apps/garage-data", params={"customerId": GID})

    assert response.status_code == 200
    profile = response.json()
    assert profile["name"] == "Pete Mitchell"
    assert profile["xp"] == 2500
    assert profile["victories"] == 0
    assert profile["achievements"] == achievements
    assert profile["paint"] == "crimson"


@pytest.mark.anyio
async def test_garage_data_not_found(client, shopify):
    shopify.queue_data({"customer": None})

    response = await client.get("/apps/garage-data", params={"customerId": "987"})

    assert response.status_code == 404
    assert response.json() == {"error": "Customer not found."}


@pytest.mark.anyio
async def test_garage_data_transport_failure(client, shopify):
    shopify.queue(httpx.ConnectError("connection refused"))

    response = await client.get("/apps/garage-data", params={"customerId": "987"})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch garage data."


@pytest.mark.anyio
async def test_garage_data_without_shopify_configuration(shopify, imgbb):
    settings = make_settings(shopify_store_url=None)

    async with api_client(settings, shopify, imgbb) as client:
        response = await client.get("/apps/garage-data", params={"customerId": "987"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to fetch garage data."
    assert "SHOPIFY_STORE_URL" in body["details"]
    assert shopify.requests == []


@pytest.mark.anyio
async def test_upload_image(client, imgbb):
    imgbb.queue(httpx.Response(200, json={"success": True, "data": {"url": "https://i.ibb.co/xyz/car.png"}}))

    response = await client.post(
        "/apps/upload-image",
        files={"image": ("car.png", b"\x89PNG pixels", "image/png")},
    )

    assert response.status_code == 200
    assert response.json() == {"url": "https://i.ibb.co/xyz/car.png"}
    assert len(imgbb.requests) == 1


@pytest.mark.anyio
async def test_upload_image_without_file(client, imgbb):
    response = await client.post("/apps/upload-image", data={"caption": "no file here"})

    assert response.status_code == 400
    assert response.json() == {"error": "No image file provided."}
    assert imgbb.requests == []


@pytest.mark.anyio
async def test_upload_image_too_large(shopify, imgbb):
    settings = make_settings(max_upload_bytes=8)

    async with api_client(settings, shopify, imgbb) as client:
        response = await client.post(
            "/apps/upload-image",
            files={"image": ("car.png", b"0123456789", "image/png")},
        )

    assert response.status_code == 413
    assert imgbb.requests == []


@pytest.mark.anyio
async def test_upload_image_not_configured(shopify, imgbb):
    settings = make_settings(imgbb_api_key=None)

    async with api_client(settings, shopify, imgbb) as client:
        response = await client.post(
            "/apps/upload-image",
            files={"image": ("car.png", b"pixels", "image/png")},
        )

    assert response.status_code == 500
    assert response.json() == {"error": "Image hosting (IMGBB_API_KEY) is not configured on the server."}


@pytest.mark.anyio
async def test_upload_image_rejected_by_host(client, imgbb):
    imgbb.queue(httpx.Response(400, json={"success": False, "error": {"message": "Invalid image source"}}))

    response = await client.post(
        "/apps/upload-image",
        files={"image": ("car.png", b"pixels", "image/png")},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to upload image.", "details": "Invalid image source"}


@pytest.mark.anyio
async def test_update_customer_stringifies_values(client, shopify):
    shopify.queue_data(_update_ok())

    response = await client.post("/apps/update-customer", json=_update_body())

    assert response.status_code == 200
    assert response.json() == {"success": True, "id": GID}
    customer_input = shopify.json_bodies()[0]["variables"]["input"]
    assert customer_input["id"] == GID
    assert customer_input["metafields"] == [
        {"namespace": "rc_arsenal", "key": "xp", "value": "1500", "type": "number_integer"},
        {"namespace": "rc_arsenal", "key": "tier", "value": "Ace", "type": "single_line_text_field"},
        {"namespace": "rc_arsenal", "key": "is_pro", "value": "true", "type": "boolean"},
        {"namespace": "rc_arsenal", "key": "achievements", "value": '[{"id":"first-blood"}]', "type": "json"},
    ]
    for metafield in customer_input["metafields"]:
        assert isinstance(metafield["value"], str)


@pytest.mark.anyio
async def test_update_customer_is_idempotent(client, shopify):
    shopify.queue_data(_update_ok())
    shopify.queue_data(_update_ok())

    first = await client.post("/apps/update-customer", json=_update_body())
    second = await client.post("/apps/update-customer", json=_update_body())

    assert first.json() == second.json()
    bodies = shopify.json_bodies()
    assert bodies[0] == bodies[1]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [
        {"metafields": [{"key": "xp", "value": 1}]},
        {"customerId": "987"},
        {"customerId": "987", "metafields": []},
        {"customerId": "987", "metafields": "xp=1"},
        {"customerId": "987", "metafields": [{"key": "xp"}]},
        {"customerId": "987", "metafields": [{"key": "xp", "value": None}]},
    ],
)
async def test_update_customer_rejects_invalid_body(client, shopify, body):
    response = await client.post("/apps/update-customer", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request: requires customerId and a non-empty metafields array."
    assert shopify.requests == []


@pytest.mark.anyio
async def test_update_customer_rejects_bad_customer_id(client, shopify):
    response = await client.post("/apps/update-customer", json=_update_body(customerId="gid://shopify/Order/1"))

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid customer ID."
    assert shopify.requests == []


@pytest.mark.anyio
async def test_update_customer_relays_user_errors(client, shopify):
    user_errors = [{"field": ["metafields", "0", "value"], "message": "Value must be an integer."}]
    shopify.queue_data({"customerUpdate": {"customer": None, "userErrors": user_errors}})

    response = await client.post("/apps/update-customer", json=_update_body())

    assert response.status_code == 400
    assert response.json() == {"error": "Failed to update customer.", "details": user_errors}


@pytest.mark.anyio
async def test_update_customer_transport_failure(client, shopify):
    shopify.queue(httpx.ReadTimeout("timed out"))

    response = await client.post("/apps/update-customer", json=_update_body())

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to update customer data."


@pytest.mark.anyio
async def test_admin_update_with_valid_secret(client, shopify):
    shopify.queue_data(_update_ok())

    response = await client.post(
        "/apps/admin-update",
        json=_update_body(),
        headers={"X-Admin-Secret": "hangar-door"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "id": GID}
    assert len(shopify.requests) == 1


@pytest.mark.anyio
@pytest.mark.parametrize("headers", [{"X-Admin-Secret": "wrong"}, {}, {"X-Admin-Secret": "HANGAR-DOOR"}])
async def test_admin_update_rejects_bad_secret(client, shopify, headers):
    response = await client.post("/apps/admin-update", json=_update_body(), headers=headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden: invalid admin secret."}
    assert shopify.requests == []


@pytest.mark.anyio
async def test_admin_update_fails_closed_without_configured_secret(shopify, imgbb):
    settings = make_settings(admin_secret=None)

    async with api_client(settings, shopify, imgbb) as client:
        response = await client.post(
            "/apps/admin-update",
            json=_update_body(),
            headers={"X-Admin-Secret": "anything"},
        )

    assert response.status_code == 403
    assert shopify.requests == []


@pytest.mark.anyio
async def test_admin_update_checks_secret_before_body(client, shopify):
    response = await client.post("/apps/admin-update", json={}, headers={"X-Admin-Secret": "wrong"})

    assert response.status_code == 403


@pytest.mark.anyio
async def test_error_responses_never_leak_credentials(client, shopify):
    shopify.queue(httpx.Response(401, json={"errors": "[API] Invalid API key or access token"}))

    response = await client.get("/apps/killboard")

    assert response.status_code == 500
    assert "shpat_test_token" not in response.text
    assert "hangar-door" not in response.text


@pytest.mark.anyio
@pytest.mark.parametrize(
    "node",
    [
        {"key": "id", "value": "spoofed", "type": "single_line_text_field"},
        {"key": "id", "value": "5", "type": "number_integer"},
        {"key": "name", "value": "Impostor", "type": "single_line_text_field"},
    ],
)
async def test_garage_data_ignores_identity_metafields(client, shopify, node):
    shopify.queue_data(
        {
            "customer": {
                "id": GID,
                "displayName": "Pete Mitchell",
                "firstName": None,
                "lastName": None,
                "metafields": {"edges": [{"node": node}]},
            }
        }
    )

    response = await client.get("/apps/garage-data", params={"customerId": "987"})

    assert response.status_code == 200
    profile = response.json()
    assert profile["id"] == GID
    assert profile["name"] == "Pete Mitchell"


@pytest.mark.anyio
async def test_upload_image_with_text_field_instead_of_file(client, imgbb):
    response = await client.post("/apps/upload-image", data={"image": "not-a-file"})

    assert response.status_code == 400
    assert response.json()["error"] == "No image file provided."
    assert imgbb.requests == []


@pytest.mark.anyio
async def test_update_validation_message_stays_on_update_routes(client):
    response = await client.post("/apps/update-customer", json={"customerId": "987"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request: requires customerId and a non-empty metafields array."
