"""
FastAPI dependencies
"""

from fastapi import Request

from api.services.container import ServiceContainer
from utils.auth import get_bearer_token, validate_jwt


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_current_user_id(request: Request) -> str:
    """Bearer JWT -> user ID; raises AuthenticationError (401)"""
    container = get_container(request)
    token = get_bearer_token(request.headers)
    return validate_jwt(token, container.jwt_secret)
