"""
session.py

데이터베이스 엔진 및 세션(Session) 관리 파일.

이 파일은 SQLAlchemy Engine과 SessionLocal을 생성하여
애플리케이션 전반에서 공통으로 사용하는 DB 연결을 관리한다.

FastAPI 의존성(get_db)을 통해
요청 단위로 세션을 생성/종료하는 구조를 지원한다.

설계 원칙:
- DB 연결 설정은 한 곳에서만 정의
- 세션 생성/종료 책임을 명확히 분리
- pool_pre_ping=True로 유휴 연결 오류 방지
- 커밋 시 유니크 제약 위반(IntegrityError)은 ConflictError 로 변환

관련 파일:
- app.core.config        : DATABASE_URL 설정
- app.core.deps          : get_db 의존성
- app.core.errors        : ConflictError

"""

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.core.errors import ConflictError


def make_engine(url: str):
    # SQLite(로컬/테스트)는 스레드 체크를 꺼야 TestClient에서 사용 가능
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


# SQLAlchemy Engine 생성
# pool_pre_ping=True:
#   장시간 idle 후 끊어진 DB 커넥션을 자동으로 감지/재연결
engine = make_engine(settings.DATABASE_URL)

# 요청 단위로 사용할 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


"""
커밋 + 유니크 제약 위반 변환

- 여러 필드 변경을 한 번에 커밋 (전부 반영되거나 전부 롤백)
- 동시 요청 경합으로 유니크 제약이 깨지면 ConflictError 발생
- 그 외 DB 오류는 롤백 후 그대로 전파

"""

def commit_or_conflict(db: Session, conflict: ConflictError | None = None) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise conflict or ConflictError()
    except Exception:
        db.rollback()
        raise
