# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the Workforce Core HTTP API.
Upstream identity and resource services are simulated with httpx.MockTransport,
so every request travels through the real clients, services and controllers.
Run: pytest test_main.py -v
"""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from main import app
from workforce.core.config import settings
from workforce.core.dependencies import get_view_repo, init_services

client = TestClient(app)

ORG_ID = "org-1"
ORG = "/api/auth/organization"
HEADERS = {
    "X-Organization-ID": ORG_ID,
    "X-User-Email": "olga@example.com",
    "Authorization": "Bearer test-token",
}


def _member(user_id, email, role, name):
    return {
        "id": f"mem-{user_id}",
        "organizationId": ORG_ID,
        "userId": user_id,
        "role": role,
        "user": {"id": user_id, "email": email, "name": name},
    }


class FakeUpstream:
    """In-memory identity + resource services behind one MockTransport handler."""

    def __init__(self):
        self.actor_id = "u-owner"
        self.members = [
            _member("u-owner", "olga@example.com", "owner", "Olga"),
            _member("u-ada", "ada@example.com", "admin", "Ada"),
            _member("u-bob", "bob@example.com", "member", "Bob"),
            _member("u-cy", "cy@example.com", "member", "Cy"),
        ]
        self.invitations = [
            {"id": "inv-1", "email": "new@example.com", "role": "member", "status": "pending"},
            {"id": "inv-2", "email": "done@example.com", "role": "member", "status": "accepted"},
        ]
        self.shifts = [
            {"id": "s-morning", "name": "Morning", "color": "#ffcc00"},
            {"id": "s-night", "name": "Night", "color": "#000066"},
        ]
        self.geofences = [
            {"id": "g-1", "name": "HQ", "type": "circle", "radius": 50},
            {"id": "g-2", "name": "Warehouse", "type": "circle", "radius": 120},
        ]
        self.schedules = {
            "u-ada": [
                {
                    "id": "a-1", "userId": "u-ada", "shiftId": "s-morning",
                    "effectiveFrom": (datetime.now(timezone.utc) - timedelta(days=3)).isoformat(),
                    "createdAt": (datetime.now(timezone.utc) - timedelta(days=3)).isoformat(),
                },
            ],
        }
        self.links = {"u-ada": {"g-1"}}
        self.fail = set()
        self.requests = []

    # ── helpers ──

    def posted(self, path):
        return [
            json.loads(r.content) for r in self.requests
            if r.method == "POST" and r.url.path == path
        ]

    def writes(self):
        return [r for r in self.requests if r.method == "POST"]

    def _ok(self, payload=None):
        return httpx.Response(200, json=payload if payload is not None else {"success": True})

    # ── dispatch ──

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.fail:
            return httpx.Response(503, text="upstream unavailable")
        body = json.loads(request.content) if request.content else {}

        if path == "/api/auth/get-session":
            return self._ok({"session": {"activeOrganizationId": ORG_ID}, "user": {"id": self.actor_id}})
        if path == f"{ORG}/get-full-organization":
            return self._ok({"id": ORG_ID, "members": self.members})
        if path == f"{ORG}/list-members":
            return self._ok({"members": self.members, "total": len(self.members)})
        if path == f"{ORG}/list-invitations":
            return self._ok(self.invitations)
        if path == f"{ORG}/remove-member":
            ref = body["memberIdOrEmail"]
            self.members = [
                m for m in self.members if ref not in (m["userId"], m["user"]["email"])
            ]
            return self._ok()
        if path == f"{ORG}/update-member-role":
            for m in self.members:
                if m["userId"] == body["memberId"]:
                    m["role"] = body["role"]
            return self._ok()
        if path == f"{ORG}/invite-member":
            self.invitations.append(
                {"id": f"inv-{len(self.invitations) + 1}", "email": body["email"],
                 "role": body["role"], "status": "pending"}
            )
            return self._ok()
        if path == f"{ORG}/cancel-invitation":
            for inv in self.invitations:
                if inv["id"] == body["invitationId"]:
                    inv["status"] = "canceled"
            return self._ok()

        if path == "/schedules/shifts":
            return self._ok({"data": self.shifts})
        if path == "/geofence/get-by-organization":
            return self._ok({"data": self.geofences})
        if path.startswith("/schedules/user/"):
            return self._ok({"data": self.schedules.get(path.rsplit("/", 1)[-1], [])})
        if path == "/schedules/assign":
            self.schedules.setdefault(body["user_id"], []).append(
                {**body, "created_at": datetime.now(timezone.utc).isoformat()}
            )
            return self._ok()
        if path == "/user-geofence/user-geofences":
            user_id = request.url.params["user_id"]
            by_id = {g["id"]: g for g in self.geofences}
            links = [{"geofence": by_id[g]} for g in sorted(self.links.get(user_id, ()))]
            return self._ok({"data": {"assignments": links}})
        if path == "/user-geofence/assign":
            ids = [g["id"] for g in self.geofences] if body["assign_all"] else body["geofence_ids"]
            self.links.setdefault(body["user_id"], set()).update(ids)
            return self._ok()
        if path == "/user-geofence/remove":
            links = self.links.get(body["user_id"], set())
            if body["geofence_id"] not in links:
                return httpx.Response(404, json={"message": "link not found"})
            links.discard(body["geofence_id"])
            return self._ok()
        if path == "/user-geofence/remove-all":
            self.links.pop(body["user_id"], None)
            return self._ok()
        return httpx.Response(404, json={"message": "no such route"})


# ============================================
# Fixtures
# ============================================
@pytest.fixture(autouse=True)
def upstream(monkeypatch):
    """Fresh upstream state and an empty view cache for every test."""
    monkeypatch.setattr(settings, "RETRY_BACKOFF_BASE", 0.0)
    fake = FakeUpstream()
    get_view_repo().clear()
    init_services(httpx.AsyncClient(transport=httpx.MockTransport(fake.handle)))
    yield fake
    get_view_repo().clear()


def members_by_id(data):
    return {m["id"]: m for m in data["members"]}


# ============================================
# Health & Metrics
# ============================================
class TestHealth:
    def test_health_returns_ok(self):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == settings.SERVICE_NAME
        assert data["version"] == settings.SERVICE_VERSION
        assert "timestamp" in data

    def test_health_counts_cached_views(self):
        client.get("/api/v1/members", headers=HEADERS)
        assert client.get("/health").json()["cached_views"] == 1

    def test_readiness_reports_upstreams(self):
        data = client.get("/health/ready").json()
        assert data["upstreams"]["identity"] is True
        assert data["upstreams"]["resources"] is True
        assert data["status"] == "ready"


class TestRequestID:
    def test_request_id_propagated(self):
        response = client.get("/health", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated(self):
        assert len(client.get("/health").headers.get("X-Request-ID", "")) > 0


class TestMetrics:
    def test_metrics_expose_workforce_counters(self):
        client.get("/api/v1/members", headers=HEADERS)
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "workforce_requests_total" in response.text
        assert "workforce_upstream_requests_total" in response.text


# ============================================
# Organization context & access
# ============================================
class TestAccess:
    def test_missing_organization_header(self):
        response = client.get("/api/v1/members")
        assert response.status_code == 422

    def test_plain_member_is_forbidden(self, upstream):
        upstream.actor_id = "u-bob"
        response = client.get("/api/v1/members", headers=HEADERS)
        assert response.status_code == 403

    def test_admin_is_allowed(self, upstream):
        upstream.actor_id = "u-ada"
        assert client.get("/api/v1/members", headers=HEADERS).status_code == 200

    def test_unknown_actor_defaults_to_member(self, upstream):
        upstream.actor_id = "u-stranger"
        assert client.get("/api/v1/members", headers=HEADERS).status_code == 403

    def test_credentials_are_forwarded_upstream(self, upstream):
        client.get("/api/v1/members", headers={**HEADERS, "Cookie": "session=xyz"})
        listed = [r for r in upstream.requests if r.url.path == f"{ORG}/list-members"]
        assert listed[0].headers["authorization"] == "Bearer test-token"
        assert listed[0].headers["cookie"] == "session=xyz"
        assert listed[0].url.params["organizationId"] == ORG_ID


# ============================================
# Member view
# ============================================
class TestMemberView:
    def test_members_are_enriched(self):
        response = client.get("/api/v1/members", headers=HEADERS)
        assert response.status_code == 200
        members = members_by_id(response.json())
        assert set(members) == {"u-owner", "u-ada", "u-bob", "u-cy"}
        ada = members["u-ada"]
        assert ada["role"] == "admin"
        assert ada["shift"] == {"id": "s-morning", "name": "Morning", "color": "#ffcc00"}
        assert [g["name"] for g in ada["geofences"]] == ["HQ"]
        assert members["u-bob"]["shift"] is None
        assert members["u-bob"]["geofences"] == []

    def test_current_user_flag(self):
        members = members_by_id(client.get("/api/v1/members", headers=HEADERS).json())
        assert members["u-owner"]["is_current_user"] is True
        assert members["u-ada"]["is_current_user"] is False

    def test_view_holds_pending_invitations_only(self):
        data = client.get("/api/v1/members", headers=HEADERS).json()
        assert [i["id"] for i in data["invitations"]] == ["inv-1"]

    def test_partial_enrichment_failure(self, upstream):
        upstream.fail.add("/schedules/user/u-ada")
        response = client.get("/api/v1/members", headers=HEADERS)
        assert response.status_code == 200
        ada = members_by_id(response.json())["u-ada"]
        assert ada["shift"] is None
        assert ada["enrichment_errors"] == ["schedule"]
        assert [g["name"] for g in ada["geofences"]] == ["HQ"]

    def test_schedule_lookup_is_retried(self, upstream):
        upstream.fail.add("/schedules/user/u-ada")
        client.get("/api/v1/members", headers=HEADERS)
        attempts = [r for r in upstream.requests if r.url.path == "/schedules/user/u-ada"]
        assert len(attempts) == 1 + settings.RETRY_MAX_ATTEMPTS

    def test_invitation_failure_keeps_members(self, upstream):
        upstream.fail.add(f"{ORG}/list-invitations")
        data = client.get("/api/v1/members", headers=HEADERS).json()
        assert len(data["members"]) == 4
        assert data["invitations"] == []
        assert "invitations" in data["errors"]

    def test_cached_until_refresh_requested(self, upstream):
        client.get("/api/v1/members", headers=HEADERS)
        upstream.members.append(_member("u-dee", "dee@example.com", "member", "Dee"))
        cached = client.get("/api/v1/members", headers=HEADERS).json()
        assert "u-dee" not in members_by_id(cached)
        fresh = client.get("/api/v1/members", params={"refresh": "true"}, headers=HEADERS).json()
        assert "u-dee" in members_by_id(fresh)


# ============================================
# Bulk actions
# ============================================
class TestBulkActions:
    def test_bulk_remove_settles_and_refreshes(self, upstream):
        response = client.post("/api/v1/members/bulk", headers=HEADERS, json={
            "action": "remove",
            "member_ids": ["u-bob", "cy@example.com"],
            "invitation_ids": ["inv-1"],
            "confirm": True,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "settled"
        assert data["attempted"] == 3
        assert set(members_by_id(data["view"])) == {"u-owner", "u-ada"}
        assert data["view"]["invitations"] == []
        assert upstream.posted(f"{ORG}/cancel-invitation") == [{"invitationId": "inv-1"}]

    def test_partial_failure_reports_failed(self, upstream):
        upstream.fail.add(f"{ORG}/cancel-invitation")
        response = client.post("/api/v1/members/bulk", headers=HEADERS, json={
            "action": "remove",
            "member_ids": ["u-bob"],
            "invitation_ids": ["inv-1"],
            "confirm": True,
        })
        assert response.status_code == 502
        data = response.json()
        assert data["status"] == "failed"
        assert data["message"] == "An error occurred. Please try again."
        assert "u-bob" not in members_by_id(data["view"])
        assert [i["id"] for i in data["view"]["invitations"]] == ["inv-1"]

    def test_owner_in_selection_is_rejected(self, upstream):
        response = client.post("/api/v1/members/bulk", headers=HEADERS, json={
            "action": "remove",
            "member_ids": ["u-bob", "u-owner"],
            "confirm": True,
        })
        assert response.status_code == 409
        assert response.json()["status"] == "rejected"
        assert upstream.writes() == []

    def test_unconfirmed_batch_is_rejected(self, upstream):
        response = client.post("/api/v1/members/bulk", headers=HEADERS, json={
            "action": "remove",
            "member_ids": ["u-bob"],
        })
        assert response.status_code == 409
        assert upstream.writes() == []

    def test_noop_role_change_makes_no_call(self, upstream):
        response = client.post("/api/v1/members/bulk", headers=HEADERS, json={
            "action": "change_role",
            "member_ids": ["u-bob", "u-cy"],
            "target_role": "member",
            "confirm": True,
        })
        assert response.status_code == 409
        data = response.json()
        assert data["message"] == "Selected members already have that role."
        assert [s["reason"] for s in data["skipped"]] == ["role unchanged", "role unchanged"]
        assert upstream.writes() == []

    def test_role_change_skips_unchanged(self, upstream):
        response = client.post("/api/v1/members/bulk", headers=HEADERS, json={
            "action": "change_role",
            "member_ids": ["u-ada", "u-bob"],
            "target_role": "admin",
            "confirm": True,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["attempted"] == 1
        assert data["skipped"] == [{"kind": "member", "reference": "u-ada", "reason": "role unchanged"}]
        assert upstream.posted(f"{ORG}/update-member-role") == [
            {"memberId": "u-bob", "role": "admin", "organizationId": ORG_ID}
        ]
        assert members_by_id(data["view"])["u-bob"]["role"] == "admin"

    def test_invalid_target_role(self):
        response = client.post("/api/v1/members/bulk", headers=HEADERS, json={
            "action": "change_role",
            "member_ids": ["u-bob"],
            "target_role": "owner",
            "confirm": True,
        })
        assert response.status_code == 422

    def test_collect_emails(self):
        response = client.post("/api/v1/members/bulk/emails", headers=HEADERS, json={
            "member_ids": ["u-ada", "ada@example.com", "ghost"],
            "invitation_ids": ["inv-1"],
        })
        assert response.status_code == 200
        data = response.json()
        assert data["emails"] == ["ada@example.com", "new@example.com"]
        assert data["skipped"][0]["reference"] == "ghost"


# ============================================
# Single member mutations
# ============================================
class TestSingleMember:
    def test_remove_by_email(self, upstream):
        response = client.delete(
            "/api/v1/members/bob@example.com", params={"confirm": "true"}, headers=HEADERS,
        )
        assert response.status_code == 200
        assert upstream.posted(f"{ORG}/remove-member") == [
            {"memberIdOrEmail": "u-bob", "organizationId": ORG_ID}
        ]

    def test_remove_unknown_member(self, upstream):
        response = client.delete(
            "/api/v1/members/ghost", params={"confirm": "true"}, headers=HEADERS,
        )
        assert response.status_code == 409
        assert upstream.writes() == []

    def test_change_role(self, upstream):
        response = client.put(
            "/api/v1/members/u-ada/role", headers=HEADERS, json={"role": "member", "confirm": True},
        )
        assert response.status_code == 200
        assert members_by_id(response.json()["view"])["u-ada"]["role"] == "member"

    def test_owner_role_is_immutable(self, upstream):
        response = client.put(
            "/api/v1/members/u-owner/role", headers=HEADERS, json={"role": "admin", "confirm": True},
        )
        assert response.status_code == 409
        assert upstream.writes() == []


# ============================================
# Shift & location assignment
# ============================================
class TestAssignments:
    def test_assign_shift_then_view_shows_it(self, upstream):
        client.get("/api/v1/members", headers=HEADERS)
        start = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
        response = client.post("/api/v1/members/u-bob/shift", headers=HEADERS, json={
            "shift_id": "s-night", "effective_from": start,
        })
        assert response.status_code == 200
        assert response.json()["success"] is True
        body = upstream.posted("/schedules/assign")[0]
        assert body["user_id"] == "u-bob"
        assert body["effective_until"] is None
        bob = members_by_id(client.get("/api/v1/members", headers=HEADERS).json())["u-bob"]
        assert bob["shift"]["name"] == "Night"

    def test_newer_assignment_supersedes(self, upstream):
        start = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
        client.post("/api/v1/members/u-ada/shift", headers=HEADERS, json={
            "shift_id": "s-night", "effective_from": start,
        })
        ada = members_by_id(client.get("/api/v1/members", headers=HEADERS).json())["u-ada"]
        assert ada["shift"]["name"] == "Night"
        assert len(upstream.schedules["u-ada"]) == 2

    def test_inverted_window_is_rejected(self, upstream):
        response = client.post("/api/v1/members/u-bob/shift", headers=HEADERS, json={
            "shift_id": "s-night",
            "effective_from": "2026-05-10T00:00:00Z",
            "effective_until": "2026-05-01T00:00:00Z",
        })
        assert response.status_code == 409
        assert upstream.writes() == []

    def test_upstream_failure_is_502(self, upstream):
        upstream.fail.add("/schedules/assign")
        response = client.post("/api/v1/members/u-bob/shift", headers=HEADERS, json={
            "shift_id": "s-night", "effective_from": "2026-05-10T00:00:00Z",
        })
        assert response.status_code == 502
        assert response.json()["success"] is False

    def test_assign_locations_is_additive(self, upstream):
        response = client.post("/api/v1/members/u-ada/locations", headers=HEADERS, json={
            "geofence_ids": ["g-2"],
        })
        assert response.status_code == 200
        assert upstream.links["u-ada"] == {"g-1", "g-2"}

    def test_assign_all_locations(self, upstream):
        response = client.post("/api/v1/members/u-bob/locations", headers=HEADERS, json={
            "assign_all": True,
        })
        assert response.status_code == 200
        assert upstream.posted("/user-geofence/assign")[0]["geofence_ids"] is None
        assert upstream.links["u-bob"] == {"g-1", "g-2"}

    def test_empty_location_selection(self, upstream):
        response = client.post("/api/v1/members/u-bob/locations", headers=HEADERS, json={})
        assert response.status_code == 409
        assert upstream.writes() == []

    def test_remove_location_is_idempotent(self, upstream):
        first = client.delete("/api/v1/members/u-ada/locations/g-1", headers=HEADERS)
        second = client.delete("/api/v1/members/u-ada/locations/g-1", headers=HEADERS)
        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["success"] is True
        assert upstream.links["u-ada"] == set()

    def test_remove_all_locations(self, upstream):
        response = client.delete("/api/v1/members/u-ada/locations", headers=HEADERS)
        assert response.status_code == 200
        assert "u-ada" not in upstream.links


# ============================================
# Invitations
# ============================================
class TestInvitations:
    def test_list_pending(self):
        data = client.get("/api/v1/invitations", headers=HEADERS).json()
        assert [i["id"] for i in data["invitations"]] == ["inv-1"]
        assert data["error"] is None

    def test_invite_member(self, upstream):
        response = client.post("/api/v1/invitations", headers=HEADERS, json={
            "email": "hire@example.com", "role": "admin",
        })
        assert response.status_code == 201
        assert upstream.posted(f"{ORG}/invite-member") == [
            {"email": "hire@example.com", "role": "admin", "organizationId": ORG_ID}
        ]
        emails = [i["email"] for i in client.get("/api/v1/invitations", headers=HEADERS).json()["invitations"]]
        assert "hire@example.com" in emails

    def test_invite_rejects_bad_email(self, upstream):
        response = client.post("/api/v1/invitations", headers=HEADERS, json={"email": "nope"})
        assert response.status_code == 422
        assert upstream.writes() == []

    def test_invite_upstream_failure(self, upstream):
        upstream.fail.add(f"{ORG}/invite-member")
        response = client.post("/api/v1/invitations", headers=HEADERS, json={"email": "a@example.com"})
        assert response.status_code == 502

    def test_cancel_invitation(self, upstream):
        response = client.delete(
            "/api/v1/invitations/inv-1", params={"confirm": "true"}, headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["view"]["invitations"] == []


# ============================================
# Catalogs
# ============================================
class TestCatalog:
    def test_list_shifts(self):
        response = client.get("/api/v1/shifts", headers=HEADERS)
        assert response.status_code == 200
        assert [s["name"] for s in response.json()] == ["Morning", "Night"]

    def test_list_geofences(self, upstream):
        response = client.get("/api/v1/geofences", headers=HEADERS)
        assert response.status_code == 200
        assert [g["id"] for g in response.json()] == ["g-1", "g-2"]
        listed = [r for r in upstream.requests if r.url.path == "/geofence/get-by-organization"]
        assert listed[0].url.params["id"] == ORG_ID

    def test_catalog_failure_is_502(self, upstream):
        upstream.fail.add("/schedules/shifts")
        assert client.get("/api/v1/shifts", headers=HEADERS).status_code == 502
