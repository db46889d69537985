from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from taskapi.database import get_db
from taskapi.models.user import User
from taskapi.services.auth_service import AuthService
from taskapi.services.task_service import TaskService
from taskapi.services.user_service import UserService
from taskapi.utils.security import CredentialService, ACCESS
from taskapi.utils.exceptions import UnauthorizedException, NotFoundException

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


# ─── Injected Components ──────────────────────────────────────────────────────
# Built once in create_app() and stored on app.state

def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


# ─── Get Current User ─────────────────────────────────────────────────────────
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    credential_service: CredentialService = Depends(get_credentials),
) -> User:
    """
    Validate the JWT Bearer access token and return the current User.
    Raises 401 if the token is missing, 403 if it is invalid or expired,
    404 if the account no longer exists.
    """
    if not credentials:
        raise UnauthorizedException("Access token required")

    payload = credential_service.verify_token(credentials.credentials, ACCESS)

    user = db.query(User).filter(User.id == payload["userId"]).first()
    if not user:
        raise NotFoundException("User")

    return user
