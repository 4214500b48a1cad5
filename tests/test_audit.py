"""Audit log listing and export."""

from __future__ import annotations

import pytest

from tests.conftest import PASSWORD


async def _login(http, seeded, email: str) -> None:
    async with http(seeded.host) as client:
        resp = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200


class TestAuditApi:
    @pytest.mark.asyncio
    async def test_advisor_lists_tenant_entries_only(self, http, mueller, schmidt) -> None:
        await _login(http, mueller, "client@mueller.de")
        await _login(http, schmidt, "client@schmidt.de")

        async with http(mueller.host, mueller.owner_credential) as client:
            resp = await client.get("/api/v1/audit-logs", params={"action": "login"})

        assert resp.status_code == 200
        entries = resp.json()["data"]
        assert [e["userId"] for e in entries] == [mueller.client_user.id]
        assert entries[0]["userEmail"] == "client@mueller.de"

    @pytest.mark.asyncio
    async def test_export_is_chronological_and_audited(self, http, mueller) -> None:
        await _login(http, mueller, "client@mueller.de")
        await _login(http, mueller, "owner@mueller.de")

        async with http(mueller.host, mueller.owner_credential) as client:
            first = await client.get("/api/v1/audit-logs/export")
            second = await client.get("/api/v1/audit-logs/export")

        assert [e["action"] for e in first.json()["data"]] == ["login", "login"]
        assert [e["action"] for e in second.json()["data"]] == ["login", "login", "export"]

    @pytest.mark.asyncio
    async def test_client_cannot_read_audit_log(self, http, mueller) -> None:
        async with http(mueller.host, mueller.client_credential) as client:
            listed = await client.get("/api/v1/audit-logs")
            exported = await client.get("/api/v1/audit-logs/export")
        assert listed.status_code == 403
        assert exported.status_code == 403
