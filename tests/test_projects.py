"""Tests for project CRUD, team membership, filtering, sorting and search."""

from fastapi.testclient import TestClient


class TestProjectCrud:
    def test_create_project(self, client: TestClient, register) -> None:
        headers, user = register("alice")

        response = client.post(
            "/api/projects",
            json={"name": "Website", "description": "Company site", "priority": "high", "tags": ["web"]},
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Project created successfully"
        project = data["project"]
        assert project["ownerId"] == user["id"]
        assert project["status"] == "planning"
        assert project["priority"] == "high"
        assert project["tags"] == ["web"]
        assert project["progress"] == 0
        assert project["members"] == []
        assert project["budget"] == {"allocated": 0, "spent": 0}
        assert project["remainingBudget"] == 0
        assert project["milestones"] == []

    def test_create_requires_name(self, client: TestClient, register) -> None:
        headers, _ = register("alice")

        response = client.post("/api/projects", json={"description": "no name"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid name")

    def test_invalid_status_on_create(self, client: TestClient, register) -> None:
        headers, _ = register("alice")

        response = client.post(
            "/api/projects",
            json={"name": "X", "description": "Y", "status": "bogus"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid status")

    def test_get_project(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        project = make_project(headers)

        response = client.get(f"/api/projects/{project['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json()["project"]["name"] == "Website"

    def test_get_missing_project(self, client: TestClient, register) -> None:
        headers, _ = register("alice")

        response = client.get("/api/projects/missing", headers=headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}

    def test_outsider_cannot_view(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        outsider, _ = register("mallory")
        project = make_project(headers)

        response = client.get(f"/api/projects/{project['id']}", headers=outsider)

        assert response.status_code == 403

    def test_admin_can_view_any_project(self, client: TestClient, register, admin, make_project) -> None:
        headers, _ = register("alice")
        admin_headers, _ = admin
        project = make_project(headers)

        response = client.get(f"/api/projects/{project['id']}", headers=admin_headers)

        assert response.status_code == 200

    def test_update_project_merges(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        project = make_project(headers, tags=["a"])

        response = client.put(
            f"/api/projects/{project['id']}", json={"description": "Updated"}, headers=headers
        )

        assert response.status_code == 200
        updated = response.json()["project"]
        assert response.json()["message"] == "Project updated successfully"
        assert updated["description"] == "Updated"
        assert updated["name"] == "Website"
        assert updated["tags"] == ["a"]

    def test_member_cannot_update(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        bob_headers, bob = register("bob")
        project = make_project(headers)
        client.post(f"/api/projects/{project['id']}/members", json={"userId": bob["id"]}, headers=headers)

        response = client.put(f"/api/projects/{project['id']}", json={"name": "Hijack"}, headers=bob_headers)

        assert response.status_code == 403

    def test_delete_project_removes_tasks(self, client: TestClient, register, make_project, make_task) -> None:
        headers, _ = register("alice")
        project = make_project(headers)
        task = make_task(headers, project["id"])

        response = client.delete(f"/api/projects/{project['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Project deleted successfully"}
        assert client.get(f"/api/projects/{project['id']}", headers=headers).status_code == 404
        assert client.get(f"/api/tasks/{task['id']}", headers=headers).status_code == 404

    def test_update_status(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        project = make_project(headers)

        put = client.put(f"/api/projects/{project['id']}/status", json={"status": "active"}, headers=headers)
        post = client.post(
            f"/api/projects/{project['id']}/status", json={"status": "on-hold"}, headers=headers
        )

        assert put.status_code == 200
        assert put.json()["project"]["status"] == "active"
        assert post.json()["message"] == "Project status updated successfully"
        assert post.json()["project"]["status"] == "on-hold"

    def test_update_status_invalid(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        project = make_project(headers)

        response = client.put(f"/api/projects/{project['id']}/status", json={"status": "done"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid status")


class TestProjectListing:
    def test_list_only_visible_projects(self, client: TestClient, register, make_project) -> None:
        alice, _ = register("alice")
        bob, _ = register("bob")
        make_project(alice, "Alpha")
        make_project(bob, "Beta")

        response = client.get("/api/projects", headers=alice)

        data = response.json()
        assert [p["name"] for p in data["projects"]] == ["Alpha"]
        assert data["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    def test_member_sees_project(self, client: TestClient, register, make_project) -> None:
        alice, _ = register("alice")
        bob, bob_user = register("bob")
        project = make_project(alice)
        client.post(f"/api/projects/{project['id']}/members", json={"userId": bob_user["id"]}, headers=alice)

        response = client.get("/api/projects", headers=bob)

        assert [p["id"] for p in response.json()["projects"]] == [project["id"]]

    def test_filter(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        make_project(headers, "Alpha", priority="high", status="active")
        make_project(headers, "Beta", priority="high")
        make_project(headers, "Gamma", priority="low", status="active")

        response = client.get(
            "/api/projects/filter", params={"status": "active", "priority": "high"}, headers=headers
        )

        assert [p["name"] for p in response.json()["projects"]] == ["Alpha"]

    def test_filter_invalid_enum(self, client: TestClient, register) -> None:
        headers, _ = register("alice")

        response = client.get("/api/projects/filter", params={"priority": "extreme"}, headers=headers)

        assert response.status_code == 400

    def test_sort_by_name(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        for name in ("Charlie", "alpha", "Bravo"):
            make_project(headers, name)

        asc = client.get("/api/projects/sort", params={"field": "name"}, headers=headers)
        desc = client.get("/api/projects/sort", params={"field": "name", "order": "desc"}, headers=headers)

        assert [p["name"] for p in asc.json()["projects"]] == ["Bravo", "Charlie", "alpha"]
        assert [p["name"] for p in desc.json()["projects"]] == ["alpha", "Charlie", "Bravo"]

    def test_sort_by_priority_is_stable(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        make_project(headers, "First", priority="high")
        make_project(headers, "Second", priority="low")
        make_project(headers, "Third", priority="high")
        make_project(headers, "Fourth", priority="critical")

        response = client.get("/api/projects/sort", params={"field": "priority"}, headers=headers)

        assert [p["name"] for p in response.json()["projects"]] == ["Second", "First", "Third", "Fourth"]

    def test_sort_by_date(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        for name in ("A", "B", "C"):
            make_project(headers, name)

        desc = client.get("/api/projects/sort", params={"field": "date", "order": "desc"}, headers=headers)
        by_created = client.get("/api/projects/sort", params={"field": "createdAt"}, headers=headers)

        assert [p["name"] for p in desc.json()["projects"]] == ["C", "B", "A"]
        projects = by_created.json()["projects"]
        assert [p["name"] for p in projects] == ["A", "B", "C"]
        created = [p["createdAt"] for p in projects]
        assert created == sorted(created)

    def test_sort_invalid_field(self, client: TestClient, register) -> None:
        headers, _ = register("alice")

        response = client.get("/api/projects/sort", params={"field": "color"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid sort field")

    def test_sort_invalid_order(self, client: TestClient, register) -> None:
        headers, _ = register("alice")

        response = client.get("/api/projects/sort", params={"order": "sideways"}, headers=headers)

        assert response.status_code == 400

    def test_search(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        make_project(headers, "Website Redesign")
        make_project(headers, "Mobile", description="Native WEBSITE companion")
        make_project(headers, "Backend")

        response = client.get("/api/projects/search", params={"q": "website"}, headers=headers)

        assert sorted(p["name"] for p in response.json()["projects"]) == ["Mobile", "Website Redesign"]

    def test_search_blank_returns_all(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        make_project(headers, "One")
        make_project(headers, "Two")

        response = client.get("/api/projects/search", params={"q": ""}, headers=headers)

        assert len(response.json()["projects"]) == 2


class TestTeamMembers:
    def test_add_member(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        _, bob = register("bob")
        project = make_project(headers)

        response = client.post(
            f"/api/projects/{project['id']}/members",
            json={"userId": bob["id"], "role": "tester"},
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Team member added successfully"
        members = response.json()["project"]["members"]
        assert [(m["userId"], m["role"]) for m in members] == [(bob["id"], "tester")]

    def test_add_member_twice_is_noop(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        _, bob = register("bob")
        project = make_project(headers)
        url = f"/api/projects/{project['id']}/members"

        client.post(url, json={"userId": bob["id"]}, headers=headers)
        response = client.post(url, json={"userId": bob["id"]}, headers=headers)

        assert len(response.json()["project"]["members"]) == 1

    def test_add_member_by_id_without_account(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        project = make_project(headers)
        url = f"/api/projects/{project['id']}/members"

        response = client.post(url, json={"userId": "user456", "role": "developer"}, headers=headers)

        assert response.status_code == 201
        members = response.json()["project"]["members"]
        assert members[0]["userId"] == "user456"
        assert members[0]["role"] == "developer"

        client.post(url, json={"userId": "user789"}, headers=headers)
        removed = client.delete(f"{url}/user789", headers=headers)

        assert removed.status_code == 200
        assert [m["userId"] for m in removed.json()["project"]["members"]] == ["user456"]

    def test_remove_member_is_idempotent(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        _, bob = register("bob")
        project = make_project(headers)
        client.post(f"/api/projects/{project['id']}/members", json={"userId": bob["id"]}, headers=headers)
        url = f"/api/projects/{project['id']}/members/{bob['id']}"

        first = client.delete(url, headers=headers)
        second = client.delete(url, headers=headers)

        assert first.status_code == 200
        assert first.json()["message"] == "Team member removed successfully"
        assert first.json()["project"]["members"] == []
        assert second.status_code == 200
        assert second.json()["project"]["members"] == []

    def test_remove_non_member_is_noop(self, client: TestClient, register, make_project) -> None:
        headers, user = register("alice")
        project = make_project(headers)

        response = client.delete(f"/api/projects/{project['id']}/members/{user['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json()["project"]["members"] == []
        assert response.json()["project"]["ownerId"] == user["id"]

    def test_outsider_cannot_manage_members(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        outsider, _ = register("mallory")
        project = make_project(headers)

        response = client.post(
            f"/api/projects/{project['id']}/members", json={"userId": "user456"}, headers=outsider
        )

        assert response.status_code == 403


class TestProjectProgress:
    def test_progress_follows_completed_tasks(self, client: TestClient, register, make_project, make_task) -> None:
        headers, _ = register("alice")
        project = make_project(headers)
        tasks = [make_task(headers, project["id"], f"Task {i}") for i in range(3)]

        client.put(f"/api/tasks/{tasks[0]['id']}/status", json={"status": "completed"}, headers=headers)
        progress = client.get(f"/api/projects/{project['id']}", headers=headers).json()["project"]["progress"]
        assert progress == 33

        client.delete(f"/api/tasks/{tasks[2]['id']}", headers=headers)
        progress = client.get(f"/api/projects/{project['id']}", headers=headers).json()["project"]["progress"]
        assert progress == 50

    def test_project_tasks(self, client: TestClient, register, make_project, make_task) -> None:
        headers, _ = register("alice")
        project = make_project(headers)
        other = make_project(headers, "Other")
        make_task(headers, project["id"], "Mine")
        make_task(headers, other["id"], "Elsewhere")

        response = client.get(f"/api/projects/{project['id']}/tasks", headers=headers)

        assert [t["title"] for t in response.json()["tasks"]] == ["Mine"]


class TestBudgetAndMilestones:
    def test_create_with_budget_and_dates(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")

        project = make_project(
            headers,
            budget={"allocated": 1000, "spent": 250},
            startDate="2024-01-01T00:00:00",
            endDate="2024-01-11T00:00:00",
        )

        assert project["budget"] == {"allocated": 1000, "spent": 250}
        assert project["remainingBudget"] == 750
        assert project["duration"] == 10

    def test_open_ended_project_has_no_duration(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")

        project = make_project(headers)

        assert project["duration"] is None

    def test_negative_budget_is_rejected(self, client: TestClient, register) -> None:
        headers, _ = register("alice")

        response = client.post(
            "/api/projects",
            json={"name": "X", "description": "Y", "budget": {"allocated": -5}},
            headers=headers,
        )

        assert response.status_code == 400

    def test_create_with_milestones(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")

        project = make_project(
            headers,
            milestones=[
                {"name": "Design", "status": "completed"},
                {"name": "Launch", "description": "Go live", "dueDate": "2030-06-01T00:00:00"},
            ],
        )

        design, launch = project["milestones"]
        assert design["status"] == "completed"
        assert design["completedAt"] is not None
        assert launch["status"] == "pending"
        assert launch["completedAt"] is None
        assert launch["description"] == "Go live"
        assert launch["dueDate"].startswith("2030-06-01")

    def test_update_merges_budget_and_replaces_milestones(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        project = make_project(
            headers,
            budget={"allocated": 1000, "spent": 100},
            milestones=[{"name": "Design"}, {"name": "Build"}],
        )

        response = client.put(
            f"/api/projects/{project['id']}",
            json={"budget": {"spent": 500}, "milestones": [{"name": "Ship", "status": "overdue"}]},
            headers=headers,
        )

        assert response.status_code == 200
        updated = response.json()["project"]
        assert updated["budget"] == {"allocated": 1000, "spent": 500}
        assert updated["remainingBudget"] == 500
        assert [(m["name"], m["status"]) for m in updated["milestones"]] == [("Ship", "overdue")]

    def test_budget_totals_in_statistics(self, client: TestClient, register, make_project) -> None:
        headers, _ = register("alice")
        make_project(headers, "One", budget={"allocated": 1000, "spent": 250})
        make_project(headers, "Two", budget={"allocated": 500, "spent": 50})

        response = client.get("/api/advanced/stats", headers=headers)

        planning = response.json()["projectStatistics"][0]
        assert planning["totalBudget"] == 1500
        assert planning["totalSpent"] == 300
