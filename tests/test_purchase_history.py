import pytest

from app.models import Purchase


@pytest.fixture(name="orders")
def orders_fixture(user, make_service, make_course, checkout):
    service = make_service()
    course = make_course()
    return [
        checkout(user, purchaseType="service", serviceId=service.id),
        checkout(user, purchaseType="course", courseId=course.id),
        checkout(user, purchaseType="service", serviceId=service.id),
    ]


def test_status_endpoint(client, user, auth_headers, orders):
    response = client.get(
        f"/purchases/status/{orders[0]['orderId']}", headers=auth_headers(user)
    )

    assert response.status_code == 200
    assert response.json() == {
        "orderId": orders[0]["orderId"],
        "status": "pending",
        "amount": 99.99,
        "currency": "INR",
    }


def test_status_endpoint_scoped_to_owner(client, make_user, auth_headers, orders):
    response = client.get(
        f"/purchases/status/{orders[0]['orderId']}", headers=auth_headers(make_user())
    )
    assert response.status_code == 404


def test_list_is_paginated_newest_first(client, user, auth_headers, orders):
    response = client.get("/purchases?page=1&limit=2", headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body["purchases"]] == [
        orders[2]["purchaseId"],
        orders[1]["purchaseId"],
    ]
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "totalPages": 2,
        "hasNextPage": True,
        "hasPrevPage": False,
    }


def test_list_filters(client, session, user, auth_headers, orders):
    purchase = session.get(Purchase, orders[0]["purchaseId"])
    purchase.status = "failed"
    session.add(purchase)
    session.commit()

    headers = auth_headers(user)
    by_type = client.get("/purchases?purchaseType=course", headers=headers).json()
    by_status = client.get("/purchases?status=failed", headers=headers).json()

    assert [p["purchaseType"] for p in by_type["purchases"]] == ["course"]
    assert [p["id"] for p in by_status["purchases"]] == [orders[0]["purchaseId"]]


def test_list_includes_purchased_item(client, user, auth_headers, orders):
    body = client.get("/purchases", headers=auth_headers(user)).json()
    by_id = {p["id"]: p for p in body["purchases"]}

    service_purchase = by_id[orders[0]["purchaseId"]]
    assert service_purchase["service"] == {
        "id": service_purchase["serviceId"],
        "name": "Career Mentoring",
        "slug": "career-mentoring",
        "price": 99.99,
    }
    assert service_purchase["course"] is None

    course_purchase = by_id[orders[1]["purchaseId"]]
    assert course_purchase["course"]["title"] == "Data Structures in Depth"
    assert "description" not in course_purchase["course"]
    assert course_purchase["service"] is None


def test_list_rejects_oversized_limit(client, user, auth_headers):
    response = client.get("/purchases?limit=101", headers=auth_headers(user))
    assert response.status_code == 422


def test_list_only_shows_own_purchases(client, make_user, auth_headers, orders):
    response = client.get("/purchases", headers=auth_headers(make_user()))
    assert response.json()["purchases"] == []


def test_detail(client, user, make_user, auth_headers, orders):
    purchase_id = orders[1]["purchaseId"]

    response = client.get(f"/purchases/{purchase_id}", headers=auth_headers(user))
    assert response.status_code == 200
    purchase = response.json()["purchase"]
    assert purchase["purchaseType"] == "course"
    assert purchase["metadata"]["itemName"] == "Data Structures in Depth"
    assert purchase["course"] == {
        "id": purchase["courseId"],
        "title": "Data Structures in Depth",
        "thumbnail": None,
        "price": 499.0,
        "description": "Twelve week course",
    }
    assert purchase["service"] is None

    other = client.get(f"/purchases/{purchase_id}", headers=auth_headers(make_user()))
    assert other.status_code == 404


def test_admin_refund_records_transition(
    client, session, gateway, user, make_user, auth_headers, orders
):
    order = orders[0]
    signature = gateway.sign(order["orderId"], "pay_r")
    client.post(
        "/purchases/verify",
        json={
            "gatewayOrderId": order["orderId"],
            "gatewayPaymentId": "pay_r",
            "gatewaySignature": signature,
        },
        headers=auth_headers(user),
    )
    admin = make_user(role="admin")

    response = client.post(
        f"/admin/purchases/{order['purchaseId']}/refund", headers=auth_headers(admin)
    )

    assert response.status_code == 200
    body = response.json()["purchase"]
    assert body["status"] == "refunded"
    assert body["refundedAt"] is not None
    assert body["gatewayPaymentId"] == "pay_r"

    again = client.post(
        f"/admin/purchases/{order['purchaseId']}/refund", headers=auth_headers(admin)
    )
    assert again.status_code == 409


def test_admin_refund_requires_completed(client, make_user, auth_headers, orders):
    admin = make_user(role="admin")
    response = client.post(
        f"/admin/purchases/{orders[1]['purchaseId']}/refund", headers=auth_headers(admin)
    )
    assert response.status_code == 409
    assert "pending" in response.json()["detail"]


def test_admin_endpoints_reject_regular_users(client, user, auth_headers, orders):
    assert client.get("/admin/purchases", headers=auth_headers(user)).status_code == 403


def test_admin_list_sees_everyone(client, make_user, auth_headers, orders):
    admin = make_user(role="admin")
    body = client.get("/admin/purchases", headers=auth_headers(admin)).json()
    assert body["pagination"]["total"] == 3


def test_disabled_account_is_forbidden(client, make_user, auth_headers):
    blocked = make_user(can_login=False)
    assert client.get("/purchases", headers=auth_headers(blocked)).status_code == 403


def test_health_check(client):
    body = client.get("/health/check").json()
    assert body["database"] == "ok"
    assert body["payment_gateway"] == "mock"
