"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

이 파일은 .env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보
- JWT 인증 관련 시크릿 / 발급자(iss) / 대상(aud) / 만료 정책
- 비밀번호 해시 비용, 로그인 실패 잠금 정책
- 체육관(Gym) 생성 시크릿
- 쿠키 보안 옵션, CORS 허용 도메인 목록
- 로그 레벨 / 포맷

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- 설정 값은 런타임 중 변경되지 않는 불변 객체로 취급

관련 파일:
- app.main               : CORS 및 앱 초기화 시 설정 사용
- app.core.security      : JWT 시크릿 / 만료 / bcrypt 설정 사용
- app.core.logging       : LOG_LEVEL / LOG_FORMAT 사용
- app.db.session         : DATABASE_URL 사용

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


# .env 파일에 정의된 환경 변수를 로드하는 설정 클래스
# extra="ignore" 옵션으로 정의되지 않은 환경 변수는 무시
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str
    TEST_DATABASE_URL: str | None = None

    SECRET_KEY: str
    REFRESH_SECRET_KEY: str  # access 토큰과 서명 키 분리
    ALGORITHM: str = "HS256"

    TOKEN_ISSUER: str = "gym-auth"
    TOKEN_AUDIENCE: str = "gym-app"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # bcrypt cost (테스트에서는 4로 낮춰서 사용)
    BCRYPT_ROUNDS: int = 12

    # 로그인 실패 잠금 정책
    # - LOGIN_LOCK_MINUTES 안에 MAX_LOGIN_ATTEMPTS 번 실패하면
    #   같은 시간 동안 해당 이메일 로그인 차단
    MAX_LOGIN_ATTEMPTS: int = 5
    LOGIN_LOCK_MINUTES: int = 15

    # 체육관 생성 요청 시 함께 보내야 하는 시크릿 (스팸 방지)
    GYM_CREATION_SECRET: str = "change-me"

    # 쿠키/배포 옵션
    # - COOKIE_SECURE: HTTPS 환경에서만 True 권장
    # - COOKIE_SAMESITE: CSRF 완화를 위해 "lax" 기본값
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"
    COOKIE_DOMAIN: str | None = None

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:4200", "http://127.0.0.1:4200"]

    # 로그 설정
    # - LOG_FORMAT: "text" 또는 "json"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"


# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
# 실행 시 한 번만 생성됨
settings = Settings()
