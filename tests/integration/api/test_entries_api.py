"""HTTP tests for time entries."""

from uuid import uuid4

import pytest


@pytest.fixture
def project(client, auth_headers):
    response = client.post("/projects", json={"name": "acme"}, headers=auth_headers)
    assert response.status_code == 201
    return response.json()


def add_entry(client, headers, project_name="acme", **fields):
    return client.post(f"/projects/{project_name}/entries", json=fields, headers=headers)


class TestCreateEntry:
    """Test entry creation."""

    def test_create_open_entry(self, client, auth_headers, project):
        """Test that an entry without end is created open."""
        response = add_entry(client, auth_headers, start="2024-01-02T09:00:00+01:00")

        assert response.status_code == 201
        body = response.json()
        assert body["project_name"] == "acme"
        assert body["project_id"] == project["id"]
        assert body["type"] == "work"
        assert body["end"] is None
        assert body["breaks"] == 0

    def test_create_closed_entry(self, client, auth_headers, project):
        """Test instants and breaks on the wire."""
        response = add_entry(
            client,
            auth_headers,
            start="2024-01-02T09:00:00Z",
            end="2024-01-02T17:30:00Z",
            breaks=1800,
            comment="coding",
        )

        body = response.json()
        assert body["start"].startswith("2024-01-02T09:00:00")
        assert body["breaks"] == 1800
        assert body["comment"] == "coding"

    def test_day_entry(self, client, auth_headers, project):
        """Test non-work types."""
        response = add_entry(
            client,
            auth_headers,
            type="sick-child",
            start="2024-01-01T00:00:00Z",
            end="2024-01-02T00:00:00Z",
        )

        assert response.status_code == 201
        assert response.json()["type"] == "sick-child"

    def test_unknown_type(self, client, auth_headers, project):
        """Test that unknown entry types are a 400."""
        response = add_entry(client, auth_headers, type="holiday")

        assert response.status_code == 400
        assert response.json()["message"].startswith("invalid attribute type:")

    def test_negative_breaks(self, client, auth_headers, project):
        """Test that negative breaks are a 400."""
        assert add_entry(client, auth_headers, breaks=-60).status_code == 400

    def test_unknown_project(self, client, auth_headers):
        """Test creating an entry in a missing project."""
        response = add_entry(client, auth_headers, project_name="ghost")

        assert response.status_code == 404
        assert response.json() == {"message": "Project not found: ghost"}


class TestReadEntries:
    """Test entry reads."""

    def test_get_entry(self, client, auth_headers, project):
        """Test reading one entry."""
        created = add_entry(client, auth_headers, start="2024-01-02T09:00:00Z").json()

        response = client.get(f"/projects/acme/entries/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == created

    def test_unknown_entry(self, client, auth_headers, project):
        """Test 404 for unknown and malformed ids."""
        missing = uuid4()
        response = client.get(f"/projects/acme/entries/{missing}", headers=auth_headers)
        malformed = client.get("/projects/acme/entries/not-a-uuid", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"message": f"Time entry not found: acme/{missing}"}
        assert malformed.status_code == 404

    def test_entry_of_other_project(self, client, auth_headers, project):
        """Test that an entry is not reachable through another project."""
        client.post("/projects", json={"name": "globex"}, headers=auth_headers)
        created = add_entry(client, auth_headers, start="2024-01-02T09:00:00Z").json()

        response = client.get(f"/projects/globex/entries/{created['id']}", headers=auth_headers)

        assert response.status_code == 404

    def test_list_sorted_by_start(self, client, auth_headers, project):
        """Test list ordering with start-less entries last."""
        add_entry(client, auth_headers, start="2024-01-03T09:00:00Z", comment="late")
        add_entry(client, auth_headers, end="2024-01-02T12:00:00Z", comment="startless")
        add_entry(client, auth_headers, start="2024-01-01T09:00:00Z", comment="early")

        entries = client.get("/projects/acme/entries", headers=auth_headers).json()

        assert [e["comment"] for e in entries] == ["early", "late", "startless"]

    def test_all_entries_of_user(self, client, auth_headers, project, make_token):
        """Test the cross-project listing."""
        client.post("/projects", json={"name": "globex"}, headers=auth_headers)
        add_entry(client, auth_headers, start="2024-01-02T09:00:00Z")
        add_entry(client, auth_headers, project_name="globex", start="2024-01-01T09:00:00Z")
        other = {"Authorization": f"Bearer {make_token(subject='someone-else')}"}

        entries = client.get("/entries", headers=auth_headers).json()

        assert [e["project_name"] for e in entries] == ["globex", "acme"]
        assert client.get("/entries", headers=other).json() == []


class TestUpdateEntry:
    """Test entry updates."""

    def test_close_entry(self, client, auth_headers, project):
        """Test replacing an entry with an end instant."""
        created = add_entry(client, auth_headers, start="2024-01-02T09:00:00Z").json()

        response = client.put(
            f"/projects/acme/entries/{created['id']}",
            json={
                "id": created["id"],
                "start": created["start"],
                "end": "2024-01-02T17:00:00Z",
                "comment": "done",
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["end"].startswith("2024-01-02T17:00:00")
        assert response.json()["comment"] == "done"

    def test_empty_body_id_uses_url(self, client, auth_headers, project):
        """Test that a body without id updates the URL's entry."""
        created = add_entry(client, auth_headers, start="2024-01-02T09:00:00Z").json()

        response = client.put(
            f"/projects/acme/entries/{created['id']}",
            json={"start": created["start"], "comment": "edited"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_id_mismatch(self, client, auth_headers, project):
        """Test that body and URL ids must agree."""
        created = add_entry(client, auth_headers, start="2024-01-02T09:00:00Z").json()

        response = client.put(
            f"/projects/acme/entries/{created['id']}",
            json={"id": str(uuid4())},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json() == {"message": "entry ID in URL does not match entry ID in body"}

    def test_update_unknown_entry(self, client, auth_headers, project):
        """Test updating an entry that does not exist."""
        response = client.put(
            f"/projects/acme/entries/{uuid4()}", json={"comment": "x"}, headers=auth_headers
        )

        assert response.status_code == 404
