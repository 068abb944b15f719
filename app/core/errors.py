"""
errors.py

도메인 예외(Exception) 정의.

서비스 계층(app.services.*)은 HTTP를 모르는 순수 로직이므로
HTTPException 대신 이 파일의 예외를 발생시키고,
app.main 의 예외 핸들러가 status_code / code / detail 을 그대로 응답으로 변환한다.

분류:
- ValidationError      (400) : 잘못된 입력. 같은 입력으로 재시도해도 의미 없음
- AuthenticationError  (401) : 자격 증명 / 토큰 오류. 계정 존재 여부를 드러내지 않도록 메시지 통일
- AuthorizationError   (403) : 신원은 확인됐지만 역할/권한 부족
- NotFoundError        (404) : 참조한 엔티티 없음
- ConflictError        (409) : 유니크 제약 위반 (이메일 중복, 멤버십 중복 등)
- StateError           (409) : 현재 상태에서 허용되지 않는 작업 (비활성 체육관 가입 등)
- AccountLockedError   (429) : 로그인 실패 누적으로 일시 잠금

"""


class DomainError(Exception):
    status_code: int = 400
    code: str = "ERROR"
    default_detail: str = "Request failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def headers(self) -> dict | None:
        return None


class ValidationError(DomainError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_detail = "Invalid request"


class AuthenticationError(DomainError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"
    default_detail = "Could not validate credentials"

    @property
    def headers(self) -> dict | None:
        return {"WWW-Authenticate": "Bearer"}


class AuthorizationError(DomainError):
    status_code = 403
    code = "FORBIDDEN"
    default_detail = "Access denied"


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    default_detail = "Resource not found"


class ConflictError(DomainError):
    status_code = 409
    code = "CONFLICT"
    default_detail = "Resource already exists"


class StateError(DomainError):
    status_code = 409
    code = "INVALID_STATE"
    default_detail = "Operation not allowed in the current state"


class AccountLockedError(DomainError):
    status_code = 429
    code = "ACCOUNT_LOCKED"
    default_detail = "Too many failed login attempts"

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = max(1, int(retry_after_seconds))
        super().__init__(f"Account locked. Try again in {self.retry_after_seconds} seconds")

    @property
    def headers(self) -> dict | None:
        return {"Retry-After": str(self.retry_after_seconds)}


# ---- 인증 ----

class InvalidCredentials(AuthenticationError):
    # 이메일 없음 / 비밀번호 틀림 / 비활성 계정 모두 같은 메시지
    code = "INVALID_CREDENTIALS"
    default_detail = "Invalid credentials"


class TokenMissing(AuthenticationError):
    code = "TOKEN_MISSING"
    default_detail = "Not authenticated"


class InvalidToken(AuthenticationError):
    code = "TOKEN_INVALID"
    default_detail = "Could not validate credentials"


# ---- 인가 ----

class InsufficientRole(AuthorizationError):
    code = "INSUFFICIENT_ROLE"
    default_detail = "Insufficient role"


class InsufficientPermission(AuthorizationError):
    code = "INSUFFICIENT_PERMISSION"
    default_detail = "Insufficient permission"


# ---- 계정 ----

class EmailTaken(ConflictError):
    code = "EMAIL_TAKEN"
    default_detail = "Email already registered"


class WrongCurrentPassword(ValidationError):
    code = "WRONG_CURRENT_PASSWORD"
    default_detail = "Current password is incorrect"


class PasswordMismatch(ValidationError):
    code = "PASSWORD_MISMATCH"
    default_detail = "Passwords do not match"


# ---- 체육관 / 멤버십 ----

class InvalidEnrollmentCode(ValidationError):
    code = "INVALID_ENROLLMENT_CODE"
    default_detail = "Invalid enrollment code"


class GymNotJoinable(StateError):
    code = "GYM_NOT_JOINABLE"
    default_detail = "Gym is not accepting members"


class InvalidGymTransition(StateError):
    code = "INVALID_GYM_TRANSITION"
    default_detail = "Gym status transition not allowed"


class MembershipExists(ConflictError):
    code = "MEMBERSHIP_EXISTS"
    default_detail = "Already a member of this gym"
