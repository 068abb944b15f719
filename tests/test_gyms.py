"""
체육관 생성 / 목록 / 설정 / 상태 변경 테스트.
"""

import uuid

import pytest
from sqlalchemy import select

from app.core.config import settings
from app.core.errors import InvalidGymTransition
from app.models.admin_log import AdminActionLog
from app.models.gym import GymStatus
from app.models.membership import GymRole, Membership, MembershipStatus, Permission
from app.services import gyms as gym_service
from tests.helpers import (
    add_membership,
    auth_header,
    caller_for,
    create_admin_in_db,
    create_gym_in_db,
    create_user_in_db,
    login,
)


def create_gym_request(client, token: str, **overrides):
    payload = {
        "name": f"Box {uuid.uuid4().hex[:6]}",
        "description": "CrossFit box",
        "is_programming": False,
        "creation_token": settings.GYM_CREATION_SECRET,
    }
    payload.update(overrides)
    return client.post("/gyms", headers=auth_header(token), json=payload)


def test_create_gym_makes_creator_owner(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    r = create_gym_request(client, token)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "PENDING_APPROVAL"
    assert "enrollment_code" not in body

    owner = db.scalar(select(Membership).where(Membership.gym_id == uuid.UUID(body["id"])))
    assert owner.user_id == user.id
    assert owner.gym_role == GymRole.OWNER
    assert owner.status == MembershipStatus.ACTIVE
    assert owner.permissions == set(Permission)


def test_create_programming_gym_makes_creator_programmer(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    r = create_gym_request(client, token, is_programming=True)
    assert r.status_code == 201, r.text

    owner = db.scalar(select(Membership).where(Membership.gym_id == uuid.UUID(r.json()["id"])))
    assert owner.gym_role == GymRole.PROGRAMMER


def test_create_gym_requires_creation_token(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    r = create_gym_request(client, token, creation_token="nope")
    assert r.status_code == 403


def test_create_gym_duplicate_name(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    assert create_gym_request(client, token, name="Same Box").status_code == 201
    r = create_gym_request(client, token, name="Same Box")
    assert r.status_code == 409


def test_list_gyms_hides_non_active_for_users(client, db):
    user = create_user_in_db(db)
    admin = create_admin_in_db(db)
    active = create_gym_in_db(db, name="Alpha Box")
    create_gym_in_db(db, name="Beta Box", status=GymStatus.PENDING_APPROVAL)

    r = client.get("/gyms", headers=auth_header(login(client, user.email)))
    assert r.status_code == 200
    assert [g["id"] for g in r.json()] == [str(active.id)]
    assert all("enrollment_code" not in g for g in r.json())

    admin_token = login(client, admin.email)
    pending = client.get("/gyms", headers=auth_header(admin_token), params={"status": "PENDING_APPROVAL"})
    assert [g["name"] for g in pending.json()] == ["Beta Box"]
    assert len(client.get("/gyms", headers=auth_header(admin_token)).json()) == 2


def test_gym_settings_require_manage_settings(client, db):
    owner = create_user_in_db(db)
    athlete = create_user_in_db(db)
    gym = create_gym_in_db(db)
    add_membership(db, user=owner, gym=gym, gym_role=GymRole.OWNER, permissions=set(Permission))
    add_membership(db, user=athlete, gym=gym)

    denied = client.get(f"/gyms/{gym.id}/settings", headers=auth_header(login(client, athlete.email)))
    assert denied.status_code == 403
    assert denied.json()["code"] == "INSUFFICIENT_PERMISSION"

    token = login(client, owner.email)
    r = client.get(f"/gyms/{gym.id}/settings", headers=auth_header(token))
    assert r.status_code == 200
    assert r.json() == {"enrollment_code": "JOINME42", "is_auto_subscription": False}

    upd = client.put(
        f"/gyms/{gym.id}/settings",
        headers=auth_header(token),
        json={"enrollment_code": "NEWCODE1", "is_auto_subscription": True},
    )
    assert upd.status_code == 200, upd.text
    assert upd.json() == {"enrollment_code": "NEWCODE1", "is_auto_subscription": True}


def test_enrollment_code_length_checked_after_strip(client, db):
    owner = create_user_in_db(db)
    gym = create_gym_in_db(db)
    add_membership(db, user=owner, gym=gym, gym_role=GymRole.OWNER, permissions=set(Permission))
    token = login(client, owner.email)

    short = client.put(
        f"/gyms/{gym.id}/settings",
        headers=auth_header(token),
        json={"enrollment_code": "   x", "is_auto_subscription": False},
    )
    assert short.status_code == 422

    padded = client.put(
        f"/gyms/{gym.id}/settings",
        headers=auth_header(token),
        json={"enrollment_code": "  CODE99  ", "is_auto_subscription": False},
    )
    assert padded.status_code == 200, padded.text
    assert padded.json()["enrollment_code"] == "CODE99"


def test_admin_passes_gym_permission_gate(client, db):
    admin = create_admin_in_db(db)
    gym = create_gym_in_db(db)

    r = client.get(f"/gyms/{gym.id}/settings", headers=auth_header(login(client, admin.email)))
    assert r.status_code == 200


def test_status_transitions_and_audit_log(client, db):
    admin = create_admin_in_db(db)
    gym = create_gym_in_db(db, status=GymStatus.PENDING_APPROVAL)
    token = login(client, admin.email)

    for target in ("ACTIVE", "SUSPENDED", "ACTIVE"):
        r = client.put(f"/gyms/{gym.id}/status", headers=auth_header(token), json={"status": target})
        assert r.status_code == 200, r.text
        assert r.json()["status"] == target

    actions = [log.action.value for log in db.scalars(select(AdminActionLog)).all()]
    assert sorted(actions) == ["APPROVE_GYM", "REACTIVATE_GYM", "SUSPEND_GYM"]


def test_rejected_gym_never_becomes_active(db):
    admin = create_admin_in_db(db)
    gym = create_gym_in_db(db, status=GymStatus.PENDING_APPROVAL)
    caller = caller_for(admin)

    gym_service.update_gym_status(db, caller, gym.id, GymStatus.REJECTED)

    for target in GymStatus:
        with pytest.raises(InvalidGymTransition):
            gym_service.update_gym_status(db, caller, gym.id, target)

    db.refresh(gym)
    assert gym.status == GymStatus.REJECTED


def test_same_status_transition_rejected(client, db):
    admin = create_admin_in_db(db)
    gym = create_gym_in_db(db, status=GymStatus.ACTIVE)

    r = client.put(
        f"/gyms/{gym.id}/status",
        headers=auth_header(login(client, admin.email)),
        json={"status": "ACTIVE"},
    )
    assert r.status_code == 409
    assert r.json()["code"] == "INVALID_GYM_TRANSITION"


def test_status_change_requires_admin(client, db):
    user = create_user_in_db(db)
    gym = create_gym_in_db(db, status=GymStatus.PENDING_APPROVAL)
    add_membership(db, user=user, gym=gym, gym_role=GymRole.OWNER, permissions=set(Permission))

    r = client.put(
        f"/gyms/{gym.id}/status",
        headers=auth_header(login(client, user.email)),
        json={"status": "ACTIVE"},
    )
    assert r.status_code == 403


def test_delete_gym_removes_memberships(client, db):
    owner = create_user_in_db(db)
    athlete = create_user_in_db(db)
    gym = create_gym_in_db(db)
    add_membership(db, user=owner, gym=gym, gym_role=GymRole.OWNER, permissions=set(Permission))
    add_membership(db, user=athlete, gym=gym)
    gym_id = gym.id

    r = client.delete(f"/gyms/{gym_id}", headers=auth_header(login(client, owner.email)))
    assert r.status_code == 204, r.text

    db.expire_all()
    assert db.scalars(select(Membership).where(Membership.gym_id == gym_id)).all() == []
