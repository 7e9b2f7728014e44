import json

import pytest

from homeservice.models import BusinessProfile, Category, Service, User


@pytest.fixture
def business_data():
    return {
        "business_name": "Meera Electricals",
        "state": "Maharashtra",
        "city": "Pune",
        "description": "Wiring and fixtures",
    }


@pytest.mark.business
class TestBusinessProfile:
    def test_create_business_pending_with_phone_fallback(
        self, client, other_provider, auth_headers, business_data, category
    ):
        business_data["category_id"] = category.id
        response = client.post("/api/businesses", json=business_data, headers=auth_headers(other_provider))
        data = json.loads(response.data)

        assert response.status_code == 201
        assert data["business"]["is_verified"] is False
        assert data["business"]["status"] == "pending"
        assert data["business"]["phone"] == other_provider.phone
        assert data["business"]["category"] == "Plumbing"

    def test_one_business_per_provider(self, client, provider, auth_headers, business, business_data):
        response = client.post("/api/businesses", json=business_data, headers=auth_headers(provider))
        assert response.status_code == 409

    def test_unknown_category(self, client, other_provider, auth_headers, business_data):
        business_data["category_id"] = 9999
        response = client.post("/api/businesses", json=business_data, headers=auth_headers(other_provider))
        assert response.status_code == 404

    def test_missing_fields(self, client, other_provider, auth_headers):
        response = client.post("/api/businesses", json={"business_name": "Solo"}, headers=auth_headers(other_provider))
        assert response.status_code == 400

    def test_customer_cannot_create(self, client, customer, auth_headers, business_data):
        response = client.post("/api/businesses", json=business_data, headers=auth_headers(customer))
        assert response.status_code == 403

    def test_update_own_business(self, client, provider, auth_headers, business):
        response = client.put(
            f"/api/businesses/{business.id}",
            json={"city": "Mysuru", "website": "https://ravi.example", "is_verified": False},
            headers=auth_headers(provider),
        )
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["business"]["city"] == "Mysuru"
        assert data["business"]["website"] == "https://ravi.example"
        # verification is admin-controlled
        assert data["business"]["is_verified"] is True

    def test_update_invalid_phone(self, client, provider, auth_headers, business):
        response = client.put(
            f"/api/businesses/{business.id}", json={"phone": "123"}, headers=auth_headers(provider)
        )
        assert response.status_code == 400

    def test_update_other_providers_business(self, client, other_provider, auth_headers, business):
        response = client.put(
            f"/api/businesses/{business.id}", json={"city": "Goa"}, headers=auth_headers(other_provider)
        )
        assert response.status_code == 403

    def test_delete_business(self, client, provider, auth_headers, business, service, refetch):
        business_id = business.id
        response = client.delete(f"/api/businesses/{business_id}", headers=auth_headers(provider))
        assert response.status_code == 200
        assert refetch(BusinessProfile, business_id) is None

    def test_lookups(self, client, customer, provider, auth_headers, business, service):
        response = client.get(f"/api/businesses/{business.id}", headers=auth_headers(customer))
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["business"]["provider_name"] == provider.name
        assert data["business"]["services"][0]["name"] == "Tap repair"

        response = client.get(f"/api/businesses/provider/{provider.id}", headers=auth_headers(customer))
        assert json.loads(response.data)["business"]["id"] == business.id

        response = client.get("/api/businesses/provider/9999", headers=auth_headers(customer))
        assert response.status_code == 404

        assert client.get("/api/businesses/9999", headers=auth_headers(customer)).status_code == 404

    def test_list_filters(self, client, customer, auth_headers, business, unverified_business):
        response = client.get("/api/businesses", headers=auth_headers(customer))
        assert json.loads(response.data)["count"] == 2

        response = client.get("/api/businesses?verified=true", headers=auth_headers(customer))
        data = json.loads(response.data)
        assert data["count"] == 1
        assert data["businesses"][0]["id"] == business.id

        response = client.get("/api/businesses?city=Pune", headers=auth_headers(customer))
        assert json.loads(response.data)["businesses"][0]["id"] == unverified_business.id


@pytest.mark.admin
class TestAdminVerification:
    def test_queue_defaults_to_pending(self, client, admin, auth_headers, business, unverified_business, service):
        response = client.get("/api/admin/verification", headers=auth_headers(admin))
        data = json.loads(response.data)

        assert response.status_code == 200
        assert [b["id"] for b in data["businesses"]] == [unverified_business.id]

        response = client.get("/api/admin/verification?status=verified", headers=auth_headers(admin))
        data = json.loads(response.data)
        assert [b["id"] for b in data["businesses"]] == [business.id]
        assert data["businesses"][0]["service_count"] == 1

        response = client.get("/api/admin/verification?status=nope", headers=auth_headers(admin))
        assert response.status_code == 400

    def test_verify_business(self, client, admin, auth_headers, unverified_business, refetch):
        response = client.put(
            f"/api/admin/verification/{unverified_business.id}", json={"is_verified": True}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert json.loads(response.data)["business"]["status"] == "active"
        assert refetch(BusinessProfile, unverified_business.id).is_verified is True

    def test_revoke_and_bad_payload(self, client, admin, auth_headers, business):
        response = client.put(
            f"/api/admin/verification/{business.id}", json={"is_verified": "yes"}, headers=auth_headers(admin)
        )
        assert response.status_code == 400

        response = client.put(
            f"/api/admin/verification/{business.id}", json={"is_verified": False}, headers=auth_headers(admin)
        )
        assert json.loads(response.data)["business"]["is_verified"] is False

    def test_unknown_business(self, client, admin, auth_headers):
        assert client.put("/api/admin/verification/9999", headers=auth_headers(admin)).status_code == 404

    def test_non_admin_forbidden(self, client, provider, auth_headers, business):
        assert client.get("/api/admin/verification", headers=auth_headers(provider)).status_code == 403
        response = client.put(f"/api/admin/verification/{business.id}", headers=auth_headers(provider))
        assert response.status_code == 403


@pytest.mark.admin
class TestUsers:
    def test_admin_lists_users(self, client, admin, customer, provider, auth_headers):
        response = client.get("/api/users", headers=auth_headers(admin))
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["count"] == 3
        assert all("password_hash" not in user for user in data["users"])

    def test_customer_cannot_list_users(self, client, customer, auth_headers):
        assert client.get("/api/users", headers=auth_headers(customer)).status_code == 403

    def test_get_user_by_id(self, client, customer, provider, auth_headers):
        response = client.get(f"/api/users/{provider.id}", headers=auth_headers(customer))
        assert json.loads(response.data)["user"]["name"] == provider.name
        assert client.get("/api/users/9999", headers=auth_headers(customer)).status_code == 404

    def test_update_profile(self, client, customer, provider, auth_headers):
        response = client.put(
            "/api/users/profile",
            json={"name": "Asha R", "avatar": "https://cdn.example/avatars/a.png"},
            headers=auth_headers(customer),
        )
        data = json.loads(response.data)
        assert response.status_code == 200
        assert data["user"]["name"] == "Asha R"
        assert data["user"]["avatar"] == "https://cdn.example/avatars/a.png"

        response = client.put("/api/users/profile", json={"email": provider.email}, headers=auth_headers(customer))
        assert response.status_code == 409

        response = client.put("/api/users/profile", json={"phone": "12"}, headers=auth_headers(customer))
        assert response.status_code == 400

    def test_admin_deletes_user_with_cascade(
        self, client, admin, provider, auth_headers, business, service, refetch
    ):
        provider_id, business_id, service_id = provider.id, business.id, service.id

        response = client.delete(f"/api/users/{provider_id}", headers=auth_headers(admin))
        assert response.status_code == 200
        assert refetch(User, provider_id) is None
        assert refetch(BusinessProfile, business_id) is None
        assert refetch(Service, service_id) is None

    def test_admin_cannot_delete_self(self, client, admin, auth_headers):
        assert client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin)).status_code == 400


@pytest.mark.business
class TestAddresses:
    def test_address_crud(self, client, customer, auth_headers):
        payload = {"street": "4 Lake View", "city": "Chennai", "state": "TN", "zip_code": "600001", "address_type": "work"}
        response = client.post("/api/addresses", json=payload, headers=auth_headers(customer))
        assert response.status_code == 201
        address_id = json.loads(response.data)["address"]["id"]

        response = client.put(
            f"/api/addresses/{address_id}", json={"city": "Madurai"}, headers=auth_headers(customer)
        )
        assert json.loads(response.data)["address"]["city"] == "Madurai"

        response = client.get("/api/addresses", headers=auth_headers(customer))
        assert len(json.loads(response.data)["addresses"]) == 1

        assert client.delete(f"/api/addresses/{address_id}", headers=auth_headers(customer)).status_code == 200
        assert json.loads(client.get("/api/addresses", headers=auth_headers(customer)).data)["addresses"] == []

    @pytest.mark.parametrize(
        "payload",
        [
            {"street": "4 Lake View", "city": "Chennai", "state": "TN", "zip_code": "6000"},
            {"street": "4 Lake View", "city": "Chennai", "state": "TN", "zip_code": "600001", "address_type": "moon"},
            {"city": "Chennai", "state": "TN", "zip_code": "600001"},
        ],
    )
    def test_invalid_address(self, client, customer, auth_headers, payload):
        assert client.post("/api/addresses", json=payload, headers=auth_headers(customer)).status_code == 400

    def test_cannot_touch_other_users_address(self, client, other_customer, auth_headers, address):
        response = client.put(f"/api/addresses/{address.id}", json={"city": "X"}, headers=auth_headers(other_customer))
        assert response.status_code == 404
        assert client.delete(f"/api/addresses/{address.id}", headers=auth_headers(other_customer)).status_code == 404


@pytest.mark.catalog
class TestCategories:
    def test_admin_manages_categories(self, client, admin, customer, auth_headers, refetch):
        response = client.post(
            "/api/categories", json={"name": "Cleaning", "description": "Deep cleaning"}, headers=auth_headers(admin)
        )
        assert response.status_code == 201
        category_id = json.loads(response.data)["category"]["id"]

        duplicate = client.post("/api/categories", json={"name": "Cleaning"}, headers=auth_headers(admin))
        assert duplicate.status_code == 409

        response = client.put(
            f"/api/categories/{category_id}", json={"description": "Homes and offices"}, headers=auth_headers(admin)
        )
        assert json.loads(response.data)["category"]["description"] == "Homes and offices"

        listed = client.get("/api/categories", headers=auth_headers(customer))
        assert [c["name"] for c in json.loads(listed.data)["categories"]] == ["Cleaning"]

        assert client.delete(f"/api/categories/{category_id}", headers=auth_headers(admin)).status_code == 200
        assert refetch(Category, category_id) is None

    def test_non_admin_cannot_create(self, client, provider, auth_headers):
        response = client.post("/api/categories", json={"name": "Painting"}, headers=auth_headers(provider))
        assert response.status_code == 403

    def test_deleting_category_keeps_business(self, client, admin, auth_headers, business, category, refetch):
        assert client.delete(f"/api/categories/{category.id}", headers=auth_headers(admin)).status_code == 200

        reloaded = refetch(BusinessProfile, business.id)
        assert reloaded is not None
        assert reloaded.category_id is None
