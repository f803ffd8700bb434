from conftest import API, sign_up_and_in


def test_session_routes_anonymous_user_to_sign_in(client):
    response = client.get(f"{API}/auth/session")

    assert response.status_code == 200
    assert response.json() == {"authenticated": False, "user": None, "hotel_id": None, "next": "/hotel/auth"}


def test_session_routes_new_owner_to_setup(client, auth_headers):
    body = client.get(f"{API}/auth/session", headers=auth_headers).json()

    assert body["authenticated"] is True
    assert body["user"]["email"] == "owner@example.com"
    assert body["next"] == "/hotel/setup"


def test_session_routes_owner_with_hotel_to_dashboard(client, hotel_headers):
    body = client.get(f"{API}/auth/session", headers=hotel_headers).json()

    assert body["next"] == "/dashboard"
    assert body["hotel_id"] is not None


def test_hotel_scoped_endpoints_require_setup(client, auth_headers):
    response = client.get(f"{API}/catalog/room-types", headers=auth_headers)

    assert response.status_code == 428
    assert response.headers["location"] == "/hotel/setup"


def test_missing_token_is_rejected(client):
    response = client.get(f"{API}/auth/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_duplicate_sign_up_conflicts(client, auth_headers):
    response = client.post(f"{API}/auth/signup", json={"email": "Owner@Example.com", "password": "secret123"})

    assert response.status_code == 409


def test_short_password_is_rejected(client):
    response = client.post(f"{API}/auth/signup", json={"email": "new@example.com", "password": "123"})

    assert response.status_code == 422
    assert "password" in response.json()["details"]


def test_wrong_password_is_rejected(client, auth_headers):
    response = client.post(f"{API}/auth/token", data={"username": "owner@example.com", "password": "wrong-pass"})

    assert response.status_code == 401


def test_sign_out_revokes_token(client, auth_headers):
    assert client.get(f"{API}/auth/me", headers=auth_headers).status_code == 200

    response = client.post(f"{API}/auth/signout", headers=auth_headers)
    assert response.status_code == 200

    assert client.get(f"{API}/auth/me", headers=auth_headers).status_code == 401
    assert client.get(f"{API}/auth/session", headers=auth_headers).json()["next"] == "/hotel/auth"


def test_owners_only_see_their_own_hotel_data(client, hotel_headers):
    client.post(f"{API}/catalog/services", json={"name": "Laundry", "price": 150}, headers=hotel_headers)

    other = sign_up_and_in(client, email="other@example.com")
    client.put(f"{API}/hotels/setup", data={"name": "Hill View"}, headers=other)

    assert client.get(f"{API}/catalog/services", headers=other).json() == []


def test_responses_carry_request_id(client):
    response = client.get(f"{API}/auth/session", headers={"X-Request-ID": "abc123"})

    assert response.headers["x-request-id"] == "abc123"
