"""HTTP API tests."""
ADDRESS = {
    "first_name": "Asha",
    "last_name": "Rao",
    "address_line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560001",
    "phone": "9876543210",
    "email": "asha@example.com",
}


FIRST_GUEST = {"X-Forwarded-For": "10.0.0.1"}
SECOND_GUEST = {"X-Forwarded-For": "10.0.0.2"}


def create_product(client, slug, price="100.00", **extra):
    payload = {
        "name": slug.replace("-", " ").title(),
        "slug": slug,
        "description": f"A fine {slug}",
        "price": price,
        "stock_quantity": 10,
    }
    payload.update(extra)
    response = client.post("/admin/products/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestAdminProducts:
    """Catalog administration."""

    def test_create_and_get(self, client):
        product = create_product(client, "oak-table")
        response = client.get(f"/admin/products/{product['id']}")
        assert response.status_code == 200
        assert response.json()["slug"] == "oak-table"

    def test_duplicate_slug_rejected(self, client):
        create_product(client, "oak-table")
        response = client.post("/admin/products/", json={
            "name": "Other", "slug": "oak-table", "description": "dup", "price": "5.00"
        })
        assert response.status_code == 400

    def test_update_and_delete(self, client):
        product = create_product(client, "oak-table")
        response = client.put(f"/admin/products/{product['id']}", json={"stock_quantity": 3})
        assert response.json()["stock_quantity"] == 3

        assert client.delete(f"/admin/products/{product['id']}").status_code == 204
        assert client.get(f"/admin/products/{product['id']}").status_code == 404


class TestProductListing:
    """Browsing and filtering."""

    def test_filters_and_sort(self, client):
        create_product(client, "cheap-lamp", price="20.00", category="lighting")
        create_product(client, "fancy-lamp", price="200.00", category="lighting", featured=True)
        create_product(client, "sofa", price="900.00", category="seating")

        response = client.get("/user/products", params={"category": "lighting", "sort_by": "price-high"})
        data = response.json()

        assert data["total"] == 2
        assert [p["slug"] for p in data["products"]] == ["fancy-lamp", "cheap-lamp"]

    def test_search_and_price_range(self, client):
        create_product(client, "cheap-lamp", price="20.00")
        create_product(client, "fancy-lamp", price="200.00")

        response = client.get("/user/products", params={"search": "LAMP", "max_price": 50})
        assert [p["slug"] for p in response.json()["products"]] == ["cheap-lamp"]


class TestCartRoutes:
    """Cart endpoints."""

    def test_add_update_remove(self, client):
        lamp = create_product(client, "lamp", price="20.00")
        sofa = create_product(client, "sofa", price="500.00")

        client.post("/user/cart/items", json={"product_id": lamp["id"], "quantity": 2})
        response = client.post("/user/cart/items", json={"product_id": sofa["id"]})
        data = response.json()
        assert data["total_items"] == 3
        assert data["subtotal"] == 540.0
        assert data["notifications"] == [{"message": "Sofa added to cart", "severity": "success"}]

        data = client.patch(f"/user/cart/items/{lamp['id']}", json={"quantity": 0}).json()
        assert data["items"][0]["quantity"] == 2

        data = client.delete(f"/user/cart/items/{lamp['id']}").json()
        assert [item["id"] for item in data["items"]] == [sofa["id"]]
        assert data["notifications"][0]["message"] == "Lamp removed from cart"

    def test_add_unknown_product(self, client):
        assert client.post("/user/cart/items", json={"product_id": 999}).status_code == 404

    def test_stock_is_checked(self, client):
        lamp = create_product(client, "lamp", stock_quantity=1)
        response = client.post("/user/cart/items", json={"product_id": lamp["id"], "quantity": 2})
        assert response.status_code == 400

    def test_sale_price_is_used(self, client):
        lamp = create_product(client, "lamp", price="100.00", sale_price="80.00")
        data = client.post("/user/cart/items", json={"product_id": lamp["id"]}).json()
        assert data["subtotal"] == 80.0

    def test_sessions_are_separated_by_client_ip(self, client):
        lamp = create_product(client, "lamp")
        client.post("/user/cart/items", json={"product_id": lamp["id"]}, headers={"X-Forwarded-For": "10.0.0.1"})

        other = client.get("/user/cart", headers={"X-Forwarded-For": "10.0.0.2"}).json()
        same = client.get("/user/cart", headers={"X-Forwarded-For": "10.0.0.1"}).json()

        assert other["item_count"] == 0
        assert same["item_count"] == 1

    def test_new_guest_starts_with_empty_cart(self, client):
        lamp = create_product(client, "lamp")
        client.post("/user/cart/items", json={"product_id": lamp["id"]}, headers=FIRST_GUEST)

        data = client.get("/user/cart", headers={"X-Forwarded-For": "10.0.0.9"}).json()
        assert data["item_count"] == 0
        assert data["items"] == []


class TestSessionRoutes:
    """Sign-in reconciliation over HTTP."""

    def test_guest_cart_merges_into_saved_cart(self, client):
        lamp = create_product(client, "lamp")
        sofa = create_product(client, "sofa")

        # Saved cart for u1: lamp x3
        client.post("/user/session/sign-in", json={"user_id": "u1"})
        client.post("/user/cart/items", json={"product_id": lamp["id"], "quantity": 3})
        client.post("/user/session/sign-out")
        assert client.get("/user/cart").json()["item_count"] == 0

        # Guest cart: lamp x1, sofa x2
        client.post("/user/cart/items", json={"product_id": lamp["id"]})
        client.post("/user/cart/items", json={"product_id": sofa["id"], "quantity": 2})

        session = client.post("/user/session/sign-in", json={"user_id": "u1"}).json()
        assert session["authenticated"] is True

        items = client.get("/user/cart").json()["items"]
        assert [(item["id"], item["quantity"]) for item in items] == [(lamp["id"], 4), (sofa["id"], 2)]

    def test_sign_up_twice_fails(self, client):
        assert client.post("/user/session/sign-up", json={"user_id": "u1"}).status_code == 201
        client.post("/user/session/sign-out")
        assert client.post("/user/session/sign-up", json={"user_id": "u1"}).status_code == 400

    def test_current_session(self, client):
        assert client.get("/user/session").json()["authenticated"] is False

    def test_sign_in_leaves_other_guests_alone(self, client):
        lamp = create_product(client, "lamp")
        sofa = create_product(client, "sofa")
        client.post("/user/cart/items", json={"product_id": lamp["id"]}, headers=FIRST_GUEST)
        client.post("/user/cart/items", json={"product_id": sofa["id"], "quantity": 2}, headers=SECOND_GUEST)

        client.post("/user/session/sign-in", json={"user_id": "u1"}, headers=FIRST_GUEST)

        signed_in = client.get("/user/cart", headers=FIRST_GUEST).json()["items"]
        assert [(item["id"], item["quantity"]) for item in signed_in] == [(lamp["id"], 1)]
        guest = client.get("/user/cart", headers=SECOND_GUEST).json()["items"]
        assert [(item["id"], item["quantity"]) for item in guest] == [(sofa["id"], 2)]

    def test_guest_wishlist_is_per_session(self, client):
        lamp = create_product(client, "lamp")
        client.post("/user/wishlist/items", json={"product_id": lamp["id"]}, headers=FIRST_GUEST)
        client.post("/user/wishlist/items", json={"product_id": lamp["id"]}, headers=SECOND_GUEST)

        client.post("/user/session/sign-in", json={"user_id": "u1"}, headers=FIRST_GUEST)

        assert client.get("/user/wishlist", headers=SECOND_GUEST).json()["item_count"] == 1

    def test_accounts_are_shared_between_sessions(self, client):
        assert client.post("/user/session/sign-up", json={"user_id": "u1"}, headers=FIRST_GUEST).status_code == 201
        response = client.post("/user/session/sign-up", json={"user_id": "u1"}, headers=SECOND_GUEST)
        assert response.status_code == 400
        assert client.get("/user/session", headers=SECOND_GUEST).json()["authenticated"] is False

    def test_reserved_guest_ids_are_rejected(self, client):
        response = client.post("/user/session/sign-in", json={"user_id": "anonymous:session_abc"})
        assert response.status_code == 400


class TestWishlistRoutes:
    """Wishlist endpoints."""

    def test_add_check_remove(self, client):
        lamp = create_product(client, "lamp")

        client.post("/user/wishlist/items", json={"product_id": lamp["id"]})
        data = client.post("/user/wishlist/items", json={"product_id": lamp["id"]}).json()
        assert data["item_count"] == 1
        assert data["notifications"][0]["message"] == "Lamp is already in your wishlist"

        assert client.get(f"/user/wishlist/items/{lamp['id']}").json()["in_wishlist"] is True
        client.delete(f"/user/wishlist/items/{lamp['id']}")
        assert client.get(f"/user/wishlist/items/{lamp['id']}").json()["in_wishlist"] is False

    def test_clear(self, client):
        lamp = create_product(client, "lamp")
        client.post("/user/wishlist/items", json={"product_id": lamp["id"]})
        data = client.delete("/user/wishlist").json()
        assert data["item_count"] == 0


class TestCheckoutRoutes:
    """Checkout and order history endpoints."""

    def test_checkout_empty_cart(self, client):
        response = client.post("/user/checkout", json={"shipping_address": ADDRESS})
        assert response.status_code == 400

    def test_checkout_and_history(self, client):
        lamp = create_product(client, "lamp", price="600.00")
        client.post("/user/session/sign-in", json={"user_id": "u1"})
        client.post("/user/cart/items", json={"product_id": lamp["id"], "quantity": 2})

        response = client.post("/user/checkout", json={"shipping_address": ADDRESS, "payment_method": "upi"})
        assert response.status_code == 201
        order = response.json()["order"]
        assert order["shipping_amount"] == 0.0
        assert order["total_amount"] == 1416.0
        assert order["payment_status"] == "paid"

        assert client.get("/user/cart").json()["item_count"] == 0
        orders = client.get("/user/orders").json()
        assert [o["id"] for o in orders] == [order["id"]]

    def test_invalid_checkout_form(self, client):
        response = client.post("/user/checkout", json={"shipping_address": {**ADDRESS, "postal_code": "1"}})
        assert response.status_code == 422

    def test_order_detail(self, client):
        lamp = create_product(client, "lamp")
        client.post("/user/cart/items", json={"product_id": lamp["id"]}, headers=FIRST_GUEST)
        order = client.post("/user/checkout", json={"shipping_address": ADDRESS}, headers=FIRST_GUEST).json()["order"]

        response = client.get(f"/user/orders/{order['id']}", headers=FIRST_GUEST)
        assert response.status_code == 200
        assert response.json()["items"][0]["product_name"] == "Lamp"

        assert client.get(f"/user/orders/{order['id']}", headers=SECOND_GUEST).status_code == 404
        assert client.get("/user/orders/9999", headers=FIRST_GUEST).status_code == 404

    def test_order_detail_hidden_from_other_users(self, client):
        lamp = create_product(client, "lamp")
        client.post("/user/session/sign-in", json={"user_id": "u1"})
        client.post("/user/cart/items", json={"product_id": lamp["id"]})
        order = client.post("/user/checkout", json={"shipping_address": ADDRESS}).json()["order"]

        client.post("/user/session/sign-out")
        client.post("/user/session/sign-in", json={"user_id": "u2"})
        assert client.get(f"/user/orders/{order['id']}").status_code == 404

        client.post("/user/session/sign-out")
        assert client.get(f"/user/orders/{order['id']}").status_code == 404


class TestProfileRoutes:
    """Profile overview and editing."""

    def test_requires_sign_in(self, client):
        assert client.get("/user/profile").status_code == 401
        assert client.put("/user/profile", json={"first_name": "Asha"}).status_code == 401

    def test_update_profile(self, client):
        client.post("/user/session/sign-up", json={"user_id": "u1"})

        response = client.put("/user/profile", json={"first_name": " Asha ", "phone": "9876543210"})
        assert response.status_code == 200
        assert response.json()["first_name"] == "Asha"

        client.put("/user/profile", json={"last_name": "Rao"})
        profile = client.get("/user/profile").json()["profile"]
        assert profile["id"] == "u1"
        assert (profile["first_name"], profile["last_name"], profile["phone"]) == ("Asha", "Rao", "9876543210")

    def test_overview_shows_three_most_recent_orders(self, client):
        lamp = create_product(client, "lamp")
        client.post("/user/session/sign-in", json={"user_id": "u1"})
        order_ids = []
        for _ in range(4):
            client.post("/user/cart/items", json={"product_id": lamp["id"]})
            order = client.post("/user/checkout", json={"shipping_address": ADDRESS}).json()["order"]
            order_ids.append(order["id"])

        data = client.get("/user/profile").json()
        assert [o["id"] for o in data["recent_orders"]] == list(reversed(order_ids))[:3]
        assert len(client.get("/user/orders").json()) == 4


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
