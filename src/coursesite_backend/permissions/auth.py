"""
Authentication: resolves the requesting user from Basic credentials or the
signed-in cookie pair, falling back to the guest when neither is present.
"""

import base64
import binascii
import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param
from pydantic import BaseModel

from coursesite_backend.api.exceptions import BasicAuthException, UnauthorizedException
from coursesite_backend.domain.user import User
from coursesite_backend.unit_of_work import UnitOfWork, get_unit_of_work

logger = logging.getLogger(__name__)

USER_ID_COOKIE = "user_id"
USER_TOKEN_COOKIE = "user_token"


class CookieCredentials(BaseModel):
    """The cookie pair set for signed-in browsers"""
    user_id: int
    token: str


class AuthenticationService:
    """Service for handling the supported authentication methods"""
    
    @staticmethod
    def authenticate_basic(email: str, password: str, uow: UnitOfWork) -> User:
        user = User.from_email(uow, email)
        if user.is_guest or not user.is_password(password):
            logger.info(f"Rejected basic credentials for '{email}'")
            raise BasicAuthException()
        return user
    
    @staticmethod
    def authenticate_cookie(credentials: CookieCredentials, uow: UnitOfWork) -> User:
        user = User.find(uow, credentials.user_id)
        if user is None or not user.is_cookie_password(credentials.token):
            raise UnauthorizedException("Invalid session cookie")
        return user


def parse_authorization_header(request: Request) -> Optional[HTTPBasicCredentials | CookieCredentials]:
    """Parse the request credentials; None means the request is anonymous"""
    
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, param = get_authorization_scheme_param(authorization)
        
        if not param or scheme.lower() != "basic":
            raise UnauthorizedException(f"Unsupported auth scheme: {scheme}")
        
        try:
            data = base64.b64decode(param).decode("utf-8")
        except (ValueError, UnicodeDecodeError, binascii.Error) as e:
            logger.error(f"Failed to decode Basic auth: {e}")
            raise UnauthorizedException("Invalid Basic auth encoding")
        
        username, separator, password = data.partition(":")
        if not separator:
            raise UnauthorizedException("Invalid Basic auth format")
        return HTTPBasicCredentials(username=username, password=password)
    
    user_id = request.cookies.get(USER_ID_COOKIE)
    token = request.cookies.get(USER_TOKEN_COOKIE)
    if user_id and token:
        try:
            return CookieCredentials(user_id=int(user_id), token=token)
        except ValueError:
            raise UnauthorizedException("Invalid session cookie")
    
    return None


def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPBasicCredentials | CookieCredentials], Depends(parse_authorization_header)],
    uow: Annotated[UnitOfWork, Depends(get_unit_of_work)]
) -> User:
    """Main dependency for the requesting user; anonymous requests get the guest."""
    
    if credentials is None:
        return User.guest(uow)
    
    if isinstance(credentials, HTTPBasicCredentials):
        user = AuthenticationService.authenticate_basic(credentials.username, credentials.password, uow)
    else:
        user = AuthenticationService.authenticate_cookie(credentials, uow)
    
    user.update_visit_info(request.client.host if request.client else None)
    return user


def get_signed_in_user(user: Annotated[User, Depends(get_current_user)]) -> User:
    if user.is_guest:
        raise UnauthorizedException("You must sign in first.")
    return user
