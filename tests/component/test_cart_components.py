"""
Component tests for the cart API

These tests drive the real router, service and repository layers against
an in-memory SQLite database:
- API endpoints (FastAPI routes under /api/cart)
- Service layer (get-or-create, accumulate, overwrite, remove)
- Repository layer (ON CONFLICT upserts)
"""
import uuid

from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlmodel import select

from app.core.security import create_access_token
from app.models.cart import MAX_QUANTITY, Cart, CartItem
from app.models.user import User

CART_URL = "/api/cart"


def _cart_rows(session, user_id):
    session.expire_all()
    return session.exec(select(Cart).where(Cart.user_id == user_id)).all()


def _item_rows(session):
    session.expire_all()
    return session.exec(select(CartItem)).all()


class TestGetCart:
    """
    Reading the cart creates it on first access.
    """

    def test_first_read_creates_exactly_one_empty_cart(self, auth_client: TestClient, session, user):
        # Arrange
        assert _cart_rows(session, user.id) == []

        # Act
        response = auth_client.get(CART_URL)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["userId"] == str(user.id)
        assert data["totalQuantity"] == 0
        assert data["totalPrice"] == 0
        assert len(_cart_rows(session, user.id)) == 1

    def test_repeated_reads_return_the_same_cart(self, auth_client: TestClient, session, user):
        first = auth_client.get(CART_URL).json()
        second = auth_client.get(CART_URL).json()

        assert first["id"] == second["id"]
        assert len(_cart_rows(session, user.id)) == 1

    def test_cart_items_include_joined_product(self, auth_client: TestClient, product):
        auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 2})

        data = auth_client.get(CART_URL).json()

        assert len(data["items"]) == 1
        item = data["items"][0]
        assert item["quantity"] == 2
        assert item["product"]["id"] == str(product.id)
        assert item["product"]["name"] == "Smart Watch"
        assert item["product"]["price"] == 10.0
        assert item["product"]["imageUrl"] == "https://img.example.com/1.jpg"
        assert data["totalPrice"] == 20.0


class TestAddItem:
    """
    POST /api/cart accumulates quantities on one line per product.
    """

    def test_add_defaults_to_quantity_one(self, auth_client: TestClient, product):
        response = auth_client.post(CART_URL, json={"productId": str(product.id)})

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 1

    def test_new_user_add_creates_cart_lazily(self, auth_client: TestClient, session, user, product):
        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 1})

        assert response.status_code == 200
        assert len(_cart_rows(session, user.id)) == 1

    def test_repeat_add_accumulates_instead_of_duplicating(self, auth_client: TestClient, session, product):
        """
        Scenario: add P1 (qty 1) then P1 again (qty 2) => one line with quantity 3.
        """
        # Act
        auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 1})
        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 2})

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 1
        assert data["items"][0]["quantity"] == 3
        assert data["totalQuantity"] == 3

        rows = _item_rows(session)
        assert len(rows) == 1
        assert rows[0].quantity == 3

    def test_different_products_get_separate_lines(self, auth_client: TestClient, make_products):
        p1, p2 = make_products(2)

        auth_client.post(CART_URL, json={"productId": str(p1.id)})
        data = auth_client.post(CART_URL, json={"productId": str(p2.id), "quantity": 4}).json()

        quantities = {item["product"]["id"]: item["quantity"] for item in data["items"]}
        assert quantities == {str(p1.id): 1, str(p2.id): 4}
        # 10.00 * 1 + 11.00 * 4
        assert data["totalPrice"] == 54.0

    def test_unknown_product_returns_404_and_leaves_cart_unchanged(self, auth_client: TestClient, session, product):
        auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 2})

        response = auth_client.post(CART_URL, json={"productId": str(uuid.uuid4()), "quantity": 1})

        assert response.status_code == 404
        assert response.json() == {"error": "Product not found"}
        rows = _item_rows(session)
        assert [(r.product_id, r.quantity) for r in rows] == [(product.id, 2)]

    def test_malformed_product_id_is_not_found(self, auth_client: TestClient):
        response = auth_client.post(CART_URL, json={"productId": "not-a-product", "quantity": 1})

        assert response.status_code == 404

    def test_zero_quantity_is_rejected(self, auth_client: TestClient, session, product):
        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 0})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request body"
        assert body["details"]
        assert _item_rows(session) == []

    def test_negative_quantity_is_rejected(self, auth_client: TestClient, product):
        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": -3})

        assert response.status_code == 400

    def test_fractional_quantity_is_rejected(self, auth_client: TestClient, session, product):
        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 1.5})

        assert response.status_code == 400
        assert _item_rows(session) == []

    def test_string_quantity_is_rejected(self, auth_client: TestClient, product):
        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": "2"})

        assert response.status_code == 400

    def test_quantity_beyond_column_range_is_rejected(self, auth_client: TestClient, session, product):
        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 10**19})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"
        assert _item_rows(session) == []

    def test_accumulating_past_the_maximum_is_rejected(self, auth_client: TestClient, session, product):
        auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": MAX_QUANTITY - 1})

        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 2})

        assert response.status_code == 400
        assert response.json() == {"error": f"Quantity cannot exceed {MAX_QUANTITY}"}
        rows = _item_rows(session)
        assert len(rows) == 1
        assert rows[0].quantity == MAX_QUANTITY - 1

    def test_accumulating_up_to_the_maximum_is_allowed(self, auth_client: TestClient, product):
        auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": MAX_QUANTITY - 1})

        response = auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 1})

        assert response.status_code == 200
        assert response.json()["totalQuantity"] == MAX_QUANTITY

    def test_missing_product_id_is_rejected(self, auth_client: TestClient):
        response = auth_client.post(CART_URL, json={"quantity": 1})

        assert response.status_code == 400
        locations = [tuple(d["loc"]) for d in response.json()["details"]]
        assert ("body", "productId") in locations

    def test_empty_product_id_is_rejected(self, auth_client: TestClient):
        response = auth_client.post(CART_URL, json={"productId": "", "quantity": 1})

        assert response.status_code == 400


class TestSetQuantity:
    """
    PUT /api/cart overwrites the quantity of a line.
    """

    def test_set_overwrites_existing_quantity(self, auth_client: TestClient, product):
        auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 5})

        data = auth_client.put(CART_URL, json={"productId": str(product.id), "quantity": 2}).json()

        assert len(data["items"]) == 1
        assert data["items"][0]["quantity"] == 2

    def test_set_creates_missing_line(self, auth_client: TestClient, product):
        data = auth_client.put(CART_URL, json={"productId": str(product.id), "quantity": 3}).json()

        assert data["items"][0]["quantity"] == 3

    def test_set_to_zero_removes_line(self, auth_client: TestClient, session, product):
        auth_client.post(CART_URL, json={"productId": str(product.id), "quantity": 2})

        response = auth_client.put(CART_URL, json={"productId": str(product.id), "quantity": 0})

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert _item_rows(session) == []

    def test_set_unknown_product_returns_404(self, auth_client: TestClient):
        response = auth_client.put(CART_URL, json={"productId": str(uuid.uuid4()), "quantity": 1})

        assert response.status_code == 404

    def test_set_negative_quantity_is_rejected(self, auth_client: TestClient, product):
        response = auth_client.put(CART_URL, json={"productId": str(product.id), "quantity": -1})

    def test_set_quantity_beyond_column_range_is_rejected(self, auth_client: TestClient, product):
        response = auth_client.put(CART_URL, json={"productId": str(product.id), "quantity": MAX_QUANTITY + 1})

        assert response.status_code == 400

        assert response.status_code == 400


class TestRemoveItem:
    """
    DELETE /api/cart removes a product's line; removing nothing is fine.
    """

    def test_remove_existing_line(self, auth_client: TestClient, session, make_products):
        p1, p2 = make_products(2)
        auth_client.post(CART_URL, json={"productId": str(p1.id)})
        auth_client.post(CART_URL, json={"productId": str(p2.id)})

        response = auth_client.request("DELETE", CART_URL, json={"productId": str(p1.id)})

        assert response.status_code == 200
        items = response.json()["items"]
        assert [item["product"]["id"] for item in items] == [str(p2.id)]
        assert len(_item_rows(session)) == 1

    def test_remove_absent_product_is_noop(self, auth_client: TestClient, make_products):
        p1, p2 = make_products(2)
        before = auth_client.post(CART_URL, json={"productId": str(p1.id), "quantity": 2}).json()

        response = auth_client.request("DELETE", CART_URL, json={"productId": str(p2.id)})

        assert response.status_code == 200
        after = response.json()
        assert after["id"] == before["id"]
        assert after["items"] == before["items"]

    def test_remove_twice_is_idempotent(self, auth_client: TestClient, product):
        auth_client.post(CART_URL, json={"productId": str(product.id)})

        first = auth_client.request("DELETE", CART_URL, json={"productId": str(product.id)})
        second = auth_client.request("DELETE", CART_URL, json={"productId": str(product.id)})

        assert first.status_code == second.status_code == 200
        assert second.json()["items"] == []

    def test_remove_without_cart_returns_404(self, auth_client: TestClient, product):
        response = auth_client.request("DELETE", CART_URL, json={"productId": str(product.id)})

        assert response.status_code == 404
        assert response.json() == {"error": "Cart not found"}

    def test_remove_requires_product_id(self, auth_client: TestClient):
        response = auth_client.request("DELETE", CART_URL, json={})

        assert response.status_code == 400


class TestCartAccessControl:
    """
    Every cart operation needs an authenticated caller.
    """

    def test_unauthenticated_get_is_401_without_touching_database(self, test_client: TestClient, engine):
        statements = []

        def _record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(engine, "before_cursor_execute", _record)
        try:
            response = test_client.get(CART_URL)
        finally:
            event.remove(engine, "before_cursor_execute", _record)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert statements == []

    def test_unauthenticated_mutations_are_401(self, test_client: TestClient, product):
        body = {"productId": str(product.id)}

        assert test_client.post(CART_URL, json=body).status_code == 401
        assert test_client.put(CART_URL, json={**body, "quantity": 1}).status_code == 401
        assert test_client.request("DELETE", CART_URL, json=body).status_code == 401

    def test_invalid_token_is_401(self, test_client: TestClient):
        response = test_client.get(CART_URL, headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid or expired token"}

    def test_unsupported_method_is_405(self, auth_client: TestClient):
        response = auth_client.patch(CART_URL, json={})

        assert response.status_code == 405

    def test_users_only_see_their_own_cart(self, test_client: TestClient, settings, session, user, auth_headers, product):
        other = User(email="other@example.com", name="Other")
        session.add(other)
        session.commit()
        session.refresh(other)
        other_headers = {
            "Authorization": f"Bearer {create_access_token(settings, subject=str(other.id), email=other.email)}"
        }

        test_client.post(CART_URL, json={"productId": str(product.id), "quantity": 2}, headers=auth_headers)
        other_cart = test_client.get(CART_URL, headers=other_headers).json()
        mine = test_client.get(CART_URL, headers=auth_headers).json()

        assert other_cart["items"] == []
        assert mine["items"][0]["quantity"] == 2
        assert other_cart["id"] != mine["id"]
