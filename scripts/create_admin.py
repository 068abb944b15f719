"""

플랫폼 ADMIN 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 ADMIN_* 환경 변수를 읽어
  플랫폼 ADMIN 계정을 생성한다.
- 이미 ADMIN 계정이 존재하면 생성하지 않고 종료한다.

사용 목적:
- 체육관 승인/거절 API에 접근할 수 있는
  최초 관리자 계정을 안전하게 초기화하기 위함

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_admin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.db.session import SessionLocal
from app.models.user import DEFAULT_LOCALE, DEFAULT_THEME, PlatformRole, User
from app.core.security import get_password_hash
from app.services.auth import get_user_by_email, normalize_email



def main():
    db = SessionLocal()
    try:
        exists = db.scalar(
            select(User).where(User.platform_role == PlatformRole.ADMIN)
        )
        if exists:
            print("✅ ADMIN already exists. Skip creation.")
            return

        email = normalize_email(os.environ["ADMIN_EMAIL"])
        password = os.environ["ADMIN_PASSWORD"]
        first_name = os.environ.get("ADMIN_FIRST_NAME", "Platform")
        last_name = os.environ.get("ADMIN_LAST_NAME", "Admin")

        if get_user_by_email(db, email):
            raise RuntimeError("Email already exists but is not ADMIN")

        user = User(
            email=email,
            password_hash=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            platform_role=PlatformRole.ADMIN,
            enabled=True,
            locale=DEFAULT_LOCALE,
            theme=DEFAULT_THEME,
            refresh_token_version=0,
        )

        db.add(user)
        db.commit()

        print(f"🚀 ADMIN created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
