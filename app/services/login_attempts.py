"""
services/login_attempts.py

로그인 실패 누적 잠금(brute-force 방지) 로직.

- LOGIN_LOCK_MINUTES 안에 MAX_LOGIN_ATTEMPTS 번 실패하면
  그 시점부터 LOGIN_LOCK_MINUTES 동안 해당 이메일 로그인 차단
- 잠금이 걸리면 카운터는 초기화 (잠금 해제 후 다시 0부터)
- 로그인 성공 시 카운터/잠금 모두 삭제
- 가입되지 않은 이메일도 동일하게 처리

record_failure / clear 의 commit 은 호출 측(app.services.auth)에서 수행한다.
record_failure_and_commit 은 첫 실패 행을 동시에 만드는 경합까지 처리한다.

"""

from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.login_attempt import LoginAttempt


def _aware(dt: datetime | None) -> datetime | None:
    # SQLite 는 tz 정보를 버리므로 UTC 로 간주
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def seconds_until_unlock(db: Session, email: str, now: datetime | None = None) -> int:
    """잠겨 있으면 남은 초, 아니면 0."""
    now = now or datetime.now(timezone.utc)
    attempt = db.get(LoginAttempt, email)
    if attempt is None:
        return 0
    locked_until = _aware(attempt.locked_until)
    if locked_until is None or locked_until <= now:
        return 0
    return int((locked_until - now).total_seconds()) or 1


def record_failure(db: Session, email: str, now: datetime | None = None) -> bool:
    """실패 1회 기록. 이번 실패로 잠금이 걸렸으면 True."""
    now = now or datetime.now(timezone.utc)
    window = timedelta(minutes=settings.LOGIN_LOCK_MINUTES)

    attempt = db.get(LoginAttempt, email)
    if attempt is None:
        attempt = LoginAttempt(email=email, failed_count=0)
        db.add(attempt)

    first_failed_at = _aware(attempt.first_failed_at)
    if first_failed_at is None or now - first_failed_at > window:
        attempt.failed_count = 0
        attempt.first_failed_at = now

    attempt.failed_count += 1

    if attempt.failed_count >= settings.MAX_LOGIN_ATTEMPTS:
        attempt.locked_until = now + window
        attempt.failed_count = 0
        attempt.first_failed_at = None
        return True
    return False


# 같은 이메일의 첫 실패가 동시에 들어오면 한쪽 INSERT 가 유니크 제약에 걸림.
# 롤백 후 (이제 존재하는) 행에 한 번 더 기록한다.
def record_failure_and_commit(db: Session, email: str, now: datetime | None = None) -> bool:
    try:
        locked = record_failure(db, email, now=now)
        db.commit()
    except IntegrityError:
        db.rollback()
        locked = record_failure(db, email, now=now)
        db.commit()
    return locked


def clear(db: Session, email: str) -> None:
    attempt = db.get(LoginAttempt, email)
    if attempt is not None:
        db.delete(attempt)
