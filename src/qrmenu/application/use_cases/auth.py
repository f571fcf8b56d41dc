from __future__ import annotations

from qrmenu.application.dto.requests import LoginRequest
from qrmenu.application.ports.repositories import UserRepository
from qrmenu.application.security.passwords import verify_password
from qrmenu.application.security.session import SessionUser


class InvalidCredentialsError(Exception):
    pass


class Login:
    def __init__(self, user_repository: UserRepository) -> None:
        self._user_repository = user_repository

    def execute(self, request_dto: LoginRequest) -> SessionUser:
        user = self._user_repository.get_by_email(request_dto.email)
        if user is None or not user.password_hash:
            raise InvalidCredentialsError("invalid credentials")
        if not verify_password(request_dto.password, user.password_hash):
            raise InvalidCredentialsError("invalid credentials")
        return SessionUser(id=str(user.user_id), email=user.email, role=user.role)
