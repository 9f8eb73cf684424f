"""HTTP-level tests: auth, role gating and request validation with mocked DB sessions."""

import unittest
from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from app.api.v1.auth import get_current_user
from app.core.database import get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models import Notification, Project, Task, TaskEditHistory, User
from app.schemas.auth import CurrentUser
from app.schemas.tasks import SubTaskCreate
from app.services.deadlines import deadline_notifier

API = "/api/v1"


def _current_user(role: str, emp_id: str = "E001") -> CurrentUser:
    return CurrentUser(
        id=f"uid-{emp_id}",
        emp_id=emp_id,
        name="Test User",
        email=f"{emp_id.lower()}@example.com",
        role=role,
        department="Engineering",
    )


class ApiTestCase(unittest.TestCase):
    """Overrides get_db with a MagicMock session; subclasses may also override get_current_user."""

    role: str | None = None

    def setUp(self) -> None:
        self.db = MagicMock()
        app.dependency_overrides[get_db] = lambda: self.db
        if self.role is not None:
            user = _current_user(self.role)
            app.dependency_overrides[get_current_user] = lambda: user
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()


class TestPublicRoutes(ApiTestCase):
    def test_root(self) -> None:
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Taskflow API"})

    def test_health_reports_database(self) -> None:
        resp = self.client.get(f"{API}/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")

    def test_protected_route_requires_token(self) -> None:
        resp = self.client.get(f"{API}/tasks")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Not authenticated")

    def test_garbage_token_rejected(self) -> None:
        resp = self.client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid or expired token")


class TestAuth(ApiTestCase):
    def _user(self) -> User:
        return User(
            id="uid-1",
            emp_id="E001",
            name="Ann",
            email="ann@example.com",
            department="Engineering",
            role="manager",
            password_hash=hash_password("secret1"),
        )

    def test_login_and_me(self) -> None:
        user = self._user()
        self.db.query.return_value.filter.return_value.first.return_value = user

        resp = self.client.post(f"{API}/auth/login", json={"email": "ann@example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["user"]["emp_id"], "E001")

        me = self.client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["role"], "manager")

    def test_login_wrong_password(self) -> None:
        self.db.query.return_value.filter.return_value.first.return_value = self._user()
        resp = self.client.post(f"{API}/auth/login", json={"email": "ann@example.com", "password": "nope"})
        self.assertEqual(resp.status_code, 401)

    def test_token_for_deleted_user(self) -> None:
        self.db.query.return_value.filter.return_value.first.return_value = None
        token = create_access_token("uid-gone", "staff")
        resp = self.client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "User not found")

    def test_register_rejects_unknown_role(self) -> None:
        resp = self.client.post(
            f"{API}/auth/register",
            json={
                "email": "bo@example.com",
                "password": "secret1",
                "name": "Bo",
                "department": "Sales",
                "role": "intern",
                "emp_id": "E002",
            },
        )
        self.assertEqual(resp.status_code, 422)

    def test_register_rejects_bad_email(self) -> None:
        resp = self.client.post(
            f"{API}/auth/register",
            json={
                "email": "not-an-email",
                "password": "secret1",
                "name": "Bo",
                "department": "Sales",
                "role": "staff",
                "emp_id": "E002",
            },
        )
        self.assertEqual(resp.status_code, 422)

    def test_register_duplicate_emp_id(self) -> None:
        self.db.query.return_value.filter.return_value.first.return_value = ("uid-1",)
        resp = self.client.post(
            f"{API}/auth/register",
            json={
                "email": "bo@example.com",
                "password": "secret1",
                "name": "Bo",
                "department": "Sales",
                "role": "Staff",
                "emp_id": "E001",
            },
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"], "Employee ID already registered")

    def test_register_local(self) -> None:
        self.db.query.return_value.filter.return_value.first.return_value = None
        resp = self.client.post(
            f"{API}/auth/register",
            json={
                "email": "bo@example.com",
                "password": "secret1",
                "name": " Bo ",
                "department": "Sales",
                "role": "STAFF",
                "emp_id": "E002",
            },
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json(), {"ok": True, "requires_email_confirm": False})
        added = self.db.add.call_args[0][0]
        self.assertEqual(added.role, "staff")
        self.assertEqual(added.name, "Bo")
        self.assertTrue(added.password_hash.startswith("$2"))


class TestStaffIsGated(ApiTestCase):
    role = "staff"

    def test_director_endpoints_forbidden(self) -> None:
        resp = self.client.get(f"{API}/director/overview")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Access denied. Director role required.")

    def test_hr_endpoints_forbidden(self) -> None:
        resp = self.client.get(f"{API}/hr/insights")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Access denied. HR or Director role required.")

    def test_manager_projects_forbidden(self) -> None:
        resp = self.client.get(f"{API}/manager-projects/all")
        self.assertEqual(resp.status_code, 403)

    def test_workload_empty_without_managed_teams(self) -> None:
        self.db.query.return_value.filter.return_value.order_by.return_value.all.return_value = []
        resp = self.client.get(f"{API}/department_teams/workload")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["summary"]["total_members"], 0)


class TestSubtasks(ApiTestCase):
    role = "staff"

    def test_only_parent_owner_can_add(self) -> None:
        self.db.get.return_value = SimpleNamespace(id=1, owner_id="E999", collaborators=["E001"])
        resp = self.client.post(f"{API}/subtasks", json={"parent_task_id": 1, "title": "Draft"})
        self.assertEqual(resp.status_code, 403)
        self.db.add.assert_not_called()

    def test_blank_title_rejected(self) -> None:
        resp = self.client.post(f"{API}/subtasks", json={"parent_task_id": 1, "title": "   "})
        self.assertEqual(resp.status_code, 422)

    def test_collaborator_may_list(self) -> None:
        self.db.get.return_value = SimpleNamespace(id=1, owner_id="E999", collaborators=["E001"])
        self.db.query.return_value.filter.return_value.order_by.return_value.all.return_value = []
        resp = self.client.get(f"{API}/subtasks/task/1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"subtasks": []})

    def test_outsider_may_not_list(self) -> None:
        self.db.get.return_value = SimpleNamespace(id=1, owner_id="E999", collaborators=[])
        resp = self.client.get(f"{API}/subtasks/task/1")
        self.assertEqual(resp.status_code, 403)

    def test_priority_outside_range_dropped(self) -> None:
        self.assertIsNone(SubTaskCreate(parent_task_id=1, title="x", priority=42).priority)
        self.assertIsNone(SubTaskCreate(parent_task_id=1, title="x", priority="high").priority)
        self.assertEqual(SubTaskCreate(parent_task_id=1, title="x", priority="7").priority, 7)


def _assign_ids(obj: object) -> None:
    """Stand-in for db.refresh: give new rows an id."""
    if getattr(obj, "id", None) is None:
        obj.id = 2


class TestTaskUpdate(ApiTestCase):
    role = "staff"

    def _task(self, **kwargs: object) -> Task:
        values = dict(
            id=1,
            title="Old title",
            status="ongoing",
            owner_id="E001",
            collaborators=[],
            is_recurring=False,
        )
        values.update(kwargs)
        task = Task(**values)
        self.db.query.return_value.filter.return_value.first.return_value = task
        self.db.query.return_value.filter.return_value.all.return_value = []
        self.db.refresh.side_effect = _assign_ids
        return task

    def _recurring(self) -> Task:
        return self._task(
            title="Weekly report",
            due_date=date(2025, 3, 10),
            is_recurring=True,
            recurrence_pattern="weekly",
            recurrence_interval=1,
            recurrence_count=1,
            recurrence_series_id="series-1",
        )

    def _history_rows(self) -> list[TaskEditHistory]:
        return [c[0][0] for c in self.db.add.call_args_list if isinstance(c[0][0], TaskEditHistory)]

    def test_not_owner_gets_404(self) -> None:
        self.db.query.return_value.filter.return_value.first.return_value = None
        resp = self.client.put(f"{API}/tasks/9", json={"title": "New"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Task not found")
        self.db.commit.assert_not_called()

    def test_update_records_history(self) -> None:
        self._task()
        resp = self.client.put(f"{API}/tasks/1", json={"title": "New title"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["title"], "New title")
        self.assertIsNone(resp.json()["next_task"])
        rows = self._history_rows()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].action, "task_update")
        self.assertEqual(rows[0].editor_emp_id, "E001")
        self.assertEqual(rows[0].details, {"updates": {"title": {"from": "Old title", "to": "New title"}}})

    def test_null_for_required_fields_is_ignored(self) -> None:
        task = self._task()
        resp = self.client.put(f"{API}/tasks/1", json={"title": None, "status": None, "description": "d"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(task.title, "Old title")
        self.assertEqual(task.status, "ongoing")
        self.assertEqual(resp.json()["description"], "d")

    def test_completing_recurring_task_returns_next_occurrence(self) -> None:
        task = self._recurring()
        resp = self.client.put(f"{API}/tasks/1", json={"status": "completed"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "completed")
        nxt = body["next_task"]
        self.assertEqual(nxt["due_date"], "2025-03-17")
        self.assertEqual(nxt["status"], "ongoing")
        self.assertEqual(nxt["recurrence_count"], 2)
        self.assertEqual(nxt["recurrence_series_id"], "series-1")
        self.assertIsNotNone(task.last_completed_date)
        self.assertEqual(self._history_rows()[0].action, "task_update")

    def test_recurrence_error_rolls_back_completion(self) -> None:
        self._recurring()
        resp = self.client.put(f"{API}/tasks/1", json={"status": "completed", "due_date": None})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Recurring task has no due date")
        self.db.commit.assert_not_called()
        self.db.rollback.assert_called_once()
        self.assertEqual(self._history_rows(), [])

    def test_recurring_task_without_pattern_rejected(self) -> None:
        resp = self.client.post(
            f"{API}/tasks",
            json={"title": "Standup", "is_recurring": True, "due_date": "2025-03-10"},
        )
        self.assertEqual(resp.status_code, 422)
        self.db.add.assert_not_called()


class TestProjects(ApiTestCase):
    role = "staff"

    def _project(self, owner_id: str = "E001", members: list[str] | None = None) -> Project:
        project = Project(
            id=5,
            title="Apollo",
            status="active",
            owner_id=owner_id,
            members=members if members is not None else ["E002"],
        )
        self.db.get.return_value = project
        return project

    def test_update_by_non_owner_forbidden(self) -> None:
        self._project(owner_id="E999")
        resp = self.client.put(f"{API}/projects/5", json={"title": "Zeus"})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Not authorized to update this project")
        self.db.commit.assert_not_called()

    def test_delete_by_non_owner_forbidden(self) -> None:
        self._project(owner_id="E999")
        resp = self.client.delete(f"{API}/projects/5")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Not authorized to delete this project")
        self.db.delete.assert_not_called()

    def test_missing_project(self) -> None:
        self.db.get.return_value = None
        self.assertEqual(self.client.put(f"{API}/projects/5", json={"title": "Zeus"}).status_code, 404)
        resp = self.client.delete(f"{API}/projects/5")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Project not found")

    def test_owner_deletes(self) -> None:
        project = self._project()
        resp = self.client.delete(f"{API}/projects/5")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Project deleted successfully"})
        self.db.delete.assert_called_once_with(project)

    def test_null_for_required_fields_is_ignored(self) -> None:
        project = self._project()
        resp = self.client.put(
            f"{API}/projects/5",
            json={"title": None, "status": None, "members": None, "description": "Moonshot"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(project.title, "Apollo")
        self.assertEqual(project.status, "active")
        self.assertEqual(project.members, [])
        self.assertEqual(resp.json()["description"], "Moonshot")

    def test_members_exclude_caller(self) -> None:
        self._project(owner_id="E003", members=["E001", "E002"])
        self.db.query.return_value.filter.return_value.all.return_value = [
            User(emp_id="E002", name="Bo", email="bo@example.com"),
            User(emp_id="E003", name="Cy", email="cy@example.com"),
        ]
        resp = self.client.get(f"{API}/projects/5/members")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([m["emp_id"] for m in resp.json()["members"]], ["E002", "E003"])
        sql = str(self.db.query.return_value.filter.call_args[0][0].compile(compile_kwargs={"literal_binds": True}))
        self.assertIn("'E002'", sql)
        self.assertIn("'E003'", sql)
        self.assertNotIn("'E001'", sql)

    def test_members_empty_when_caller_is_alone(self) -> None:
        self._project(owner_id="E001", members=["E001"])
        resp = self.client.get(f"{API}/projects/5/members")
        self.assertEqual(resp.json(), {"members": []})
        self.db.query.assert_not_called()


class TestNotifications(ApiTestCase):
    role = "staff"

    def setUp(self) -> None:
        super().setUp()
        deadline_notifier.reset()

    def tearDown(self) -> None:
        deadline_notifier.reset()
        super().tearDown()

    def test_create_requires_fields(self) -> None:
        resp = self.client.post(f"{API}/notification", json={"title": "Hi", "emp_id": "E002"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Missing required fields")
        self.db.add.assert_not_called()

    def test_unread_count(self) -> None:
        self.db.query.return_value.filter.return_value.count.return_value = 3
        resp = self.client.get(f"{API}/notification/unread-count")
        self.assertEqual(resp.json(), {"unread_count": 3})

    def test_mark_read_of_someone_elses_notification(self) -> None:
        self.db.query.return_value.filter.return_value.first.return_value = None
        resp = self.client.patch(f"{API}/notification/7/read")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Notification not found")

    def test_mark_all_read(self) -> None:
        unread = [
            Notification(id=1, emp_id="E001", type="general", title="A", read=False),
            Notification(id=2, emp_id="E001", type="general", title="B", read=False),
        ]
        self.db.query.return_value.filter.return_value.all.return_value = unread
        resp = self.client.patch(f"{API}/notification/mark-all-read")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["message"], "All notifications marked as read")
        self.assertEqual(body["updated_count"], 2)
        self.assertEqual([n["id"] for n in body["data"]], [1, 2])
        self.assertTrue(all(n["read"] and n["read_at"] for n in body["data"]))
        self.db.commit.assert_called_once()

    def test_check_deadlines_cooldown(self) -> None:
        self.db.query.return_value.filter.return_value.all.return_value = []
        first = self.client.post(f"{API}/notification/check-deadlines")
        self.assertEqual(first.status_code, 200)
        self.assertFalse(first.json()["skipped"])
        second = self.client.post(f"{API}/notification/check-deadlines")
        self.assertTrue(second.json()["skipped"])
        forced = self.client.post(f"{API}/notification/check-deadlines", json={"force": True})
        self.assertFalse(forced.json()["skipped"])


class TestProfiles(ApiTestCase):
    def _profile(self, role: str, emp_id: str) -> dict:
        app.dependency_overrides[get_current_user] = lambda: _current_user(role)
        self.db.query.return_value.filter.return_value.first.return_value = User(
            emp_id=emp_id,
            name="Bo",
            email="bo@example.com",
            department="Sales",
            role="staff",
        )
        resp = self.client.get(f"{API}/users/profile/{emp_id}")
        self.assertEqual(resp.status_code, 200)
        return resp.json()

    def test_staff_sees_only_contact_of_others(self) -> None:
        body = self._profile("staff", "E002")
        self.assertEqual(body["email"], "bo@example.com")
        self.assertIsNone(body["department"])
        self.assertIsNone(body["role"])

    def test_privileged_roles_see_details(self) -> None:
        for role in ("manager", "director", "hr"):
            with self.subTest(role=role):
                body = self._profile(role, "E002")
                self.assertEqual(body["department"], "Sales")
                self.assertEqual(body["role"], "staff")

    def test_own_profile_shows_details(self) -> None:
        body = self._profile("staff", "E001")
        self.assertEqual(body["department"], "Sales")

    def test_unknown_user(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: _current_user("staff")
        self.db.query.return_value.filter.return_value.first.return_value = None
        self.assertEqual(self.client.get(f"{API}/users/profile/E404").status_code, 404)


class TestStaffDashboards(ApiTestCase):
    def test_director_overview_on_empty_db(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: _current_user("director")
        self.db.query.return_value.all.return_value = []
        resp = self.client.get(f"{API}/director/overview")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("companyKPIs", resp.json())

    def test_hr_unknown_report_type(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: _current_user("hr")
        resp = self.client.get(f"{API}/hr/reports/attendance")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Invalid report type")

    def test_hr_trends_rejects_unknown_period(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: _current_user("hr")
        resp = self.client.get(f"{API}/hr/analytics/trends", params={"period": "daily"})
        self.assertEqual(resp.status_code, 422)
