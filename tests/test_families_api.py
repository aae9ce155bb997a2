"""Integration tests for families and family access rules."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")


@pytest.fixture()
def accounts(register_user):
    return {
        "ana": register_user("Ana", "ana@example.com"),
        "bruno": register_user("Bruno", "bruno@example.com"),
        "carla": register_user("Carla", "carla@example.com"),
    }


def _create_family(client, headers, name="Silva") -> dict:
    response = client.post("/families/", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_creator_administers_and_belongs_to_family(client, accounts):
    family = _create_family(client, accounts["ana"]["headers"])

    assert family["admin_id"] == accounts["ana"]["id"]
    assert family["member_ids"] == [accounts["ana"]["id"]]

    listing = client.get("/families/", headers=accounts["ana"]["headers"])
    assert [item["id"] for item in listing.json()] == [family["id"]]
    assert client.get("/families/", headers=accounts["bruno"]["headers"]).json() == []


def test_members_are_added_and_removed_by_family_admin(client, accounts):
    ana, bruno = accounts["ana"], accounts["bruno"]
    family = _create_family(client, ana["headers"])

    added = client.post(
        f"/families/{family['id']}/members", json={"user_id": bruno["id"]}, headers=ana["headers"]
    )
    assert added.status_code == 200
    assert bruno["id"] in added.json()["member_ids"]
    assert client.get(f"/families/{family['id']}", headers=bruno["headers"]).status_code == 200

    removed = client.delete(
        f"/families/{family['id']}/members/{bruno['id']}", headers=ana["headers"]
    )
    assert removed.status_code == 200
    assert bruno["id"] not in removed.json()["member_ids"]
    assert client.get(f"/families/{family['id']}", headers=bruno["headers"]).status_code == 403


def test_only_family_admin_manages_members(client, accounts):
    ana, bruno, carla = accounts["ana"], accounts["bruno"], accounts["carla"]
    family = _create_family(client, ana["headers"])
    client.post(f"/families/{family['id']}/members", json={"user_id": bruno["id"]}, headers=ana["headers"])

    response = client.post(
        f"/families/{family['id']}/members", json={"user_id": carla["id"]}, headers=bruno["headers"]
    )

    assert response.status_code == 403


def test_family_admin_cannot_be_removed(client, accounts):
    ana = accounts["ana"]
    family = _create_family(client, ana["headers"])

    response = client.delete(f"/families/{family['id']}/members/{ana['id']}", headers=ana["headers"])

    assert response.status_code == 400


def test_missing_family_and_user_give_404(client, accounts):
    ana = accounts["ana"]
    family = _create_family(client, ana["headers"])

    assert client.get("/families/999", headers=ana["headers"]).status_code == 404
    response = client.post(
        f"/families/{family['id']}/members", json={"user_id": 999}, headers=ana["headers"]
    )
    assert response.status_code == 404


def test_system_admin_sees_every_family(client, accounts, admin_account):
    family = _create_family(client, accounts["ana"]["headers"])

    listing = client.get("/families/", headers=admin_account["headers"])
    detail = client.get(f"/families/{family['id']}", headers=admin_account["headers"])

    assert [item["id"] for item in listing.json()] == [family["id"]]
    assert detail.status_code == 200
