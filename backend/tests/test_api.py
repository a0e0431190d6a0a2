"""
HTTP tests: session cookie, admin gate, reader endpoints and error mapping.
"""

from __future__ import annotations

from conftest import login
from docmanual.settings import settings


MODULE = {
	"id": "m1",
	"name": "Auth",
	"category": "Core Systems",
	"tags": ["security"],
	"description": "Handles login",
	"content": "<p>c</p>",
	"versions": [],
}


def test_login_sets_cookie_and_session(client) -> None:
	r = login(client, "root", "rootpass")
	assert r.status_code == 200
	assert r.json() == {"id": "user-root", "username": "root", "role": "admin"}
	assert settings.session_cookie_name in r.cookies
	assert client.get("/auth/session").json()["username"] == "root"


def test_login_failure_is_generic(client) -> None:
	unknown = login(client, "nosuch", "x")
	wrong = login(client, "root", "wrongpass")
	assert unknown.status_code == wrong.status_code == 401
	assert unknown.json() == wrong.json()


def test_logout_revokes_the_token(client) -> None:
	login(client, "root", "rootpass")
	token = client.cookies.get(settings.session_cookie_name)
	assert client.post("/auth/logout").status_code == 200
	assert client.get("/auth/session").json() is None
	# the old token is dead even if replayed
	r = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
	assert r.json() is None


def test_anonymous_admin_navigation_redirects_to_login(client) -> None:
	r = client.get("/admin/modules", follow_redirects=False)
	assert r.status_code == 302
	assert r.headers["location"] == "/login?callbackUrl=%2Fadmin%2Fmodules"


def test_anonymous_admin_write_is_unauthorized(client) -> None:
	r = client.post("/admin/modules", json=MODULE)
	assert r.status_code == 401


def test_editor_is_bounced_from_admin_only_pages(client) -> None:
	login(client, "ed", "edpass")
	r = client.get("/admin/users", follow_redirects=False)
	assert r.status_code == 302
	assert r.headers["location"] == "/admin/modules"
	assert client.post("/admin/categories", json={"name": "X"}).status_code == 403
	assert client.get("/admin/modules").status_code == 200


def test_module_crud_and_reader(client) -> None:
	login(client, "ed", "edpass")
	r = client.post("/admin/modules", json={**MODULE, "isWelcome": True})
	assert r.status_code == 201
	assert r.json()["isWelcome"] is True
	assert client.post("/admin/modules", json=MODULE).status_code == 409

	page = client.get("/api/modules", params={"q": "login"}).json()
	assert page["total"] == 1 and page["items"][0]["id"] == "m1"
	assert client.get("/api/welcome").json()["id"] == "m1"
	assert client.get("/api/modules/m1").json()["name"] == "Auth"
	assert client.get("/api/modules/ghost").status_code == 404

	r = client.post("/admin/modules/m1/versions", json={"version": "1.0.0", "changes": [{"type": "new", "description": "first"}]})
	assert r.status_code == 201
	assert r.json()["versions"][0]["version"] == "1.0.0"

	assert client.put("/admin/modules/m1", json={**MODULE, "name": "Auth Core"}).json()["name"] == "Auth Core"
	assert client.put("/admin/modules/other", json=MODULE).status_code == 400
	assert client.delete("/admin/modules/m1").status_code == 200
	assert client.delete("/admin/modules/m1").status_code == 404


def test_create_module_generates_id(client) -> None:
	login(client, "ed", "edpass")
	body = {k: v for k, v in MODULE.items() if k != "id"}
	r = client.post("/admin/modules", json=body)
	assert r.status_code == 201
	assert r.json()["id"].startswith("module-")


def test_category_errors_map_to_statuses(client) -> None:
	login(client, "root", "rootpass")
	assert client.post("/admin/categories", json={"name": "Core Systems"}).status_code == 409
	client.post("/admin/modules", json=MODULE)
	r = client.delete("/admin/categories/Core Systems")
	assert r.status_code == 409
	assert "in use" in r.json()["detail"]
	assert client.put("/admin/categories/Missing", json={"name": "X"}).status_code == 404
	r = client.put("/admin/categories", json={"names": ["User Interface", "Core Systems"]})
	assert [c["name"] for c in r.json()] == ["User Interface", "Core Systems"]
	assert client.put("/admin/categories", json={"names": ["Core Systems"]}).status_code == 422


def test_category_named_order_can_be_renamed(client) -> None:
	login(client, "root", "rootpass")
	assert client.post("/admin/categories", json={"name": "order"}).status_code == 201
	r = client.put("/admin/categories/order", json={"name": "Ordering"})
	assert r.status_code == 200
	assert r.json()["name"] == "Ordering"
	names = [c["name"] for c in client.get("/admin/categories").json()]
	assert "Ordering" in names and "order" not in names


def test_reader_categories_follow_search(client) -> None:
	login(client, "root", "rootpass")
	client.post("/admin/modules", json=MODULE)
	assert len(client.get("/api/categories").json()) == 2
	assert [c["name"] for c in client.get("/api/categories", params={"q": "auth"}).json()] == ["Core Systems"]


def test_user_management(client) -> None:
	login(client, "root", "rootpass")
	users = client.get("/admin/users").json()
	assert all("password" not in u for u in users)
	r = client.post("/admin/users", json={"username": "writer", "password": "secret1", "role": "editor"})
	assert r.status_code == 201
	new_id = r.json()["id"]
	assert client.put(f"/admin/users/{new_id}", json={"username": "writer2", "role": "editor"}).status_code == 200
	assert client.delete("/admin/users/user-root").status_code == 403
	assert client.delete(f"/admin/users/{new_id}").status_code == 200


def test_self_demotion_ends_admin_rights(client) -> None:
	login(client, "root", "rootpass")
	assert client.put("/admin/users/user-editor", json={"username": "ed", "role": "admin"}).status_code == 200
	login(client, "ed", "edpass")
	assert client.get("/auth/session").json()["role"] == "admin"
	r = client.put("/admin/users/user-editor", json={"username": "ed", "role": "editor"})
	assert r.status_code == 200
	assert client.post("/admin/categories", json={"name": "Sneaky"}).status_code == 401
	assert client.get("/auth/session").json() is None
	# signing in again picks up the new role
	login(client, "ed", "edpass")
	assert client.get("/auth/session").json()["role"] == "editor"
	assert client.post("/admin/categories", json={"name": "Sneaky"}).status_code == 403


def test_password_only_self_edit_keeps_session(client) -> None:
	login(client, "root", "rootpass")
	r = client.put("/admin/users/user-root", json={"username": "root", "role": "admin", "password": "rootpass2"})
	assert r.status_code == 200
	assert client.get("/auth/session").json()["username"] == "root"


def test_change_password_endpoint(client) -> None:
	login(client, "ed", "edpass")
	r = client.post("/auth/password", json={"current_password": "nope", "new_password": "secret2"})
	assert r.status_code == 401
	r = client.post("/auth/password", json={"current_password": "edpass", "new_password": "secret2"})
	assert r.status_code == 200
	assert login(client, "ed", "secret2").status_code == 200


def test_settings_endpoints(client) -> None:
	assert client.get("/api/settings").json()["appName"] == "Module Manual"
	login(client, "root", "rootpass")
	r = client.put("/admin/settings", json={"appName": "MDS Manual"})
	assert r.status_code == 200
	assert client.get("/api/settings").json() == {"appName": "MDS Manual", "appSubtitle": None}


def test_settings_reject_null_app_name(client) -> None:
	login(client, "root", "rootpass")
	r = client.put("/admin/settings", json={"appName": None})
	assert r.status_code == 422
	assert "App name" in r.json()["detail"]
	assert client.get("/api/settings").json()["appName"] == "Module Manual"


def test_dashboard_counts(client) -> None:
	login(client, "ed", "edpass")
	data = client.get("/admin").json()
	assert data["modules"] == 0
	assert data["categories"] == 2
	assert data["user"]["role"] == "editor"


def test_toc_without_api_key(client) -> None:
	login(client, "ed", "edpass")
	r = client.post("/admin/toc", json={"documentationContent": "<h3>Overview</h3><p>x</p>"})
	assert r.status_code == 503
