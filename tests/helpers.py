# tests/helpers.py
import uuid
from typing import Iterable

from sqlalchemy import event
from sqlalchemy.orm import Session

from app.core.security import Caller, get_password_hash
from app.models.gym import Gym, GymStatus
from app.models.membership import GymRole, Membership, MembershipStatus, Permission
from app.models.user import PlatformRole, User

DEFAULT_PASSWORD = "UserPassw0rd!"
ENROLLMENT_CODE = "JOINME42"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def create_user_in_db(
    db: Session,
    *,
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
    role: PlatformRole = PlatformRole.USER,
    enabled: bool = True,
) -> User:
    user = User(
        first_name="Test",
        last_name="User",
        email=email or unique_email(),
        password_hash=get_password_hash(password),
        platform_role=role,
        enabled=enabled,
        locale="en",
        theme="light",
        refresh_token_version=0,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_admin_in_db(db: Session, *, email: str | None = None, password: str = DEFAULT_PASSWORD) -> User:
    return create_user_in_db(db, email=email or unique_email("admin"), password=password, role=PlatformRole.ADMIN)


def create_gym_in_db(
    db: Session,
    *,
    name: str | None = None,
    status: GymStatus = GymStatus.ACTIVE,
    enrollment_code: str = ENROLLMENT_CODE,
    is_auto_subscription: bool = False,
) -> Gym:
    gym = Gym(
        name=name or f"Gym {uuid.uuid4().hex[:6]}",
        description="test gym",
        is_programming=False,
        is_auto_subscription=is_auto_subscription,
        enrollment_code=enrollment_code,
        status=status,
    )
    db.add(gym)
    db.commit()
    db.refresh(gym)
    return gym


def add_membership(
    db: Session,
    *,
    user: User,
    gym: Gym,
    gym_role: GymRole = GymRole.ATHLETE,
    status: MembershipStatus = MembershipStatus.ACTIVE,
    permissions: Iterable[Permission] = (),
) -> Membership:
    membership = Membership(user_id=user.id, gym_id=gym.id, gym_role=gym_role, status=status)
    membership.set_permissions(permissions)
    db.add(membership)
    db.commit()
    db.refresh(membership)
    return membership


def caller_for(user: User) -> Caller:
    return Caller(user_id=user.id, email=user.email, role=user.platform_role)


def login(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def use_refresh_cookie(client, token: str) -> None:
    client.cookies.clear()
    client.cookies.set("refresh_token", token)


# 다음 flush 직전에 한 번만 fn 실행 (사전 확인은 통과한 뒤 다른 세션이 먼저 커밋한 상황)
def before_next_flush(session: Session, fn) -> None:
    event.listen(session, "before_flush", lambda *args: fn(), once=True)
