"""
API and page tests for the master-only admin area
"""

from tests.conftest import login


class TestMetrics:
    def test_metrics(self, master_client, db):
        db.tables["workouts"] = [
            {"id": "w1", "date": "2024-03-04", "blocks": [], "created_at": "2024-03-01T08:00:00+00:00"}
        ]
        body = master_client.get("/api/admin/metrics").json()
        assert body["total_workouts"] == 1
        assert body["total_users"] == 1
        assert body["recent_activity"][0]["type"] in ("workout_created", "user_registered")

    def test_dashboard_page(self, master_client):
        response = master_client.get("/admin")
        assert response.status_code == 200
        assert "Dashboard" in response.text


class TestUsers:
    def test_list_and_search(self, client, master, athlete):
        login(client, master)
        emails = [p["email"] for p in client.get("/api/admin/users").json()]
        assert set(emails) == {master["email"], athlete["email"]}

        found = client.get("/api/admin/users", params={"search": "athlete@"}).json()
        assert [p["id"] for p in found] == [athlete["id"]]

    def test_promoting_takes_effect_immediately(self, client, master, athlete):
        login(client, athlete)
        assert client.get("/api/admin/metrics").status_code == 403

        client.cookies.clear()
        login(client, master)
        response = client.put(f"/api/admin/users/{athlete['id']}/role", json={"role": "master"})
        assert response.status_code == 200
        assert response.json()["role"] == "master"

        client.cookies.clear()
        login(client, athlete)
        assert client.get("/api/admin/metrics").status_code == 200

    def test_unknown_role(self, client, master, athlete):
        login(client, master)
        response = client.put(f"/api/admin/users/{athlete['id']}/role", json={"role": "owner"})
        assert response.status_code == 422

    def test_delete_user(self, client, master, athlete, db):
        login(client, master)
        assert client.delete(f"/api/admin/users/{athlete['id']}").status_code == 200
        assert [p["id"] for p in db.rows("profiles")] == [master["id"]]
        assert client.delete(f"/api/admin/users/{athlete['id']}").status_code == 404

    def test_users_page(self, client, master, athlete):
        login(client, master)
        response = client.get("/admin/users", params={"search": "coach"})
        assert response.status_code == 200
        assert master["email"] in response.text
        assert athlete["email"] not in response.text


class TestAdminPages:
    def test_categories_page(self, master_client):
        response = master_client.get("/admin/categories")
        assert response.status_code == 200
        assert "Gymnastics" in response.text

    def test_category_form(self, master_client, db):
        response = master_client.post(
            "/admin/categories",
            data={"value": "engine", "label": "Engine", "color": "bg-orange-500"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert db.rows("custom_categories")[-1]["value"] == "ENGINE"

    def test_workouts_page(self, master_client):
        response = master_client.get("/admin/workouts")
        assert response.status_code == 200
        assert "New workout" in response.text

    def test_form_errors_render_error_page(self, master_client):
        response = master_client.post(
            "/admin/categories", data={"value": "oly", "label": "Dup"}, follow_redirects=False
        )
        assert response.status_code == 409
        assert "A category with that name already exists" in response.text
