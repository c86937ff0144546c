from datetime import datetime, timedelta
from decimal import Decimal

from academy.models import Coupon
from academy.services.coupon import CouponService


def test_validate_returns_quote(client, make_user, make_course, make_coupon, auth_headers):
    user = make_user()
    course = make_course(price="200.00", discount_price="150.00")
    make_coupon("HALF", value=Decimal("50"), max_discount_amount=Decimal("60"))

    response = client.post(
        "/coupons/validate",
        json={"code": " half ", "course_id": course.id},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    quote = response.json()
    assert quote["code"] == "HALF"
    assert Decimal(str(quote["original_price"])) == Decimal("150.00")
    assert Decimal(str(quote["discount_amount"])) == Decimal("60.00")
    assert Decimal(str(quote["final_price"])) == Decimal("90.00")


def test_validate_unknown_code(client, make_user, make_course, auth_headers):
    user = make_user()
    course = make_course()
    response = client.post(
        "/coupons/validate",
        json={"code": "NOPE", "course_id": course.id},
        headers=auth_headers(user),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid coupon code"


def test_validate_unknown_course(client, make_user, make_coupon, auth_headers):
    user = make_user()
    make_coupon()
    response = client.post(
        "/coupons/validate",
        json={"code": "SAVE20", "course_id": 999},
        headers=auth_headers(user),
    )
    assert response.status_code == 404
    assert response.json()["type"] == "not_found"


def test_quote_reasons(db, make_user, make_course, make_coupon, enroll):
    user = make_user()
    course = make_course(price="40.00")
    other_course = make_course()
    service = CouponService(db)

    make_coupon("OTHER", course_id=other_course.id)
    make_coupon("BIGSPEND", min_purchase_amount=Decimal("50.00"))
    make_coupon("EXPIRED", valid_to=datetime.utcnow() - timedelta(days=1))
    make_coupon("SOON", valid_from=datetime.utcnow() + timedelta(days=1))
    make_coupon("USEDUP", max_uses=2, used_count=2)

    reasons = {
        code: service.quote(code, course.id, user.id)[0].reason
        for code in ("OTHER", "BIGSPEND", "EXPIRED", "SOON", "USEDUP")
    }
    assert reasons.pop("BIGSPEND").startswith("Minimum purchase amount is 50")
    assert reasons == {
        "OTHER": "Coupon not valid for this course",
        "EXPIRED": "Coupon has expired",
        "SOON": "Coupon is not yet active",
        "USEDUP": "Coupon usage limit reached",
    }


def test_coupon_is_single_use_per_student(
    client, make_user, make_course, make_coupon, auth_headers
):
    user = make_user()
    first = make_course()
    second = make_course()
    make_coupon("WELCOME")
    headers = auth_headers(user)

    enrolled = client.post(
        "/enrollments/",
        json={"course_id": first.id, "coupon_code": "WELCOME"},
        headers=headers,
    )
    assert enrolled.status_code == 201

    response = client.post(
        "/coupons/validate", json={"code": "WELCOME", "course_id": second.id}, headers=headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "You have already used this coupon"


def test_free_coupon(client, make_user, make_course, make_coupon, auth_headers):
    user = make_user()
    course = make_course(price="99.99")
    make_coupon("GIFT", type="free", value=Decimal("0"))

    response = client.post(
        "/enrollments/",
        json={"course_id": course.id, "coupon_code": "GIFT"},
        headers=auth_headers(user),
    )
    assert response.status_code == 201
    assert Decimal(str(response.json()["amount_paid"])) == Decimal("0.00")


# ==================== Admin ====================


def test_admin_only(client, make_user, auth_headers):
    user = make_user()
    assert client.get("/coupons/", headers=auth_headers(user)).status_code == 403
    assert client.get("/coupons/").status_code == 401


def test_create_and_list(client, make_course, admin_headers):
    course = make_course()

    created = client.post(
        "/coupons/",
        json={"code": "spring", "type": "fixed", "value": "15", "course_id": course.id},
        headers=admin_headers,
    )
    assert created.status_code == 201
    assert created.json()["code"] == "SPRING"
    assert created.json()["used_count"] == 0

    duplicate = client.post(
        "/coupons/", json={"code": "SPRING", "value": "10"}, headers=admin_headers
    )
    assert duplicate.status_code == 400

    listing = client.get(f"/coupons/?course_id={course.id}", headers=admin_headers).json()
    assert listing["total"] == 1
    assert listing["coupons"][0]["code"] == "SPRING"


def test_create_rejects_percentage_over_100(client, admin_headers):
    response = client.post(
        "/coupons/", json={"code": "TOOMUCH", "value": "150"}, headers=admin_headers
    )
    assert response.status_code == 422


def test_update_and_deactivate(client, make_coupon, admin_headers):
    coupon = make_coupon("EDITME")

    updated = client.patch(
        f"/coupons/{coupon.id}", json={"value": "30", "max_uses": 5}, headers=admin_headers
    )
    assert updated.status_code == 200
    assert Decimal(str(updated.json()["value"])) == Decimal("30")
    assert updated.json()["max_uses"] == 5

    too_much = client.patch(
        f"/coupons/{coupon.id}", json={"value": "101"}, headers=admin_headers
    )
    assert too_much.status_code == 400

    removed = client.delete(f"/coupons/{coupon.id}", headers=admin_headers)
    assert removed.status_code == 200
    assert removed.json()["is_active"] is False

    missing = client.get("/coupons/999", headers=admin_headers)
    assert missing.status_code == 404


def test_analytics(client, make_user, make_course, make_coupon, auth_headers, admin_headers):
    course = make_course()
    make_coupon("A")
    make_coupon("B", is_active=False)
    client.post(
        "/enrollments/",
        json={"course_id": course.id, "coupon_code": "A"},
        headers=auth_headers(make_user()),
    )

    data = client.get("/coupons/analytics", headers=admin_headers).json()
    assert data["total_coupons"] == 2
    assert data["active_coupons"] == 1
    assert data["total_redemptions"] == 1
    assert Decimal(str(data["total_discount_given"])) == Decimal("20.00")


def test_deactivate_expired(db, make_coupon):
    make_coupon("PAST", valid_to=datetime(2026, 1, 1))
    make_coupon("FUTURE", valid_to=datetime(2026, 12, 1))
    make_coupon("FOREVER")

    assert CouponService(db).deactivate_expired(now=datetime(2026, 6, 1)) == 1

    db.expire_all()
    active = {c.code: c.is_active for c in db.query(Coupon).all()}
    assert active == {"PAST": False, "FUTURE": True, "FOREVER": True}
