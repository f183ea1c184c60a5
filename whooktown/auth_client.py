from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .context import CallContext
from .models import Model, Token, TokenType, list_of
from .transport import Transport


@dataclass
class SignupRequest(Model):
    email: str
    type: TokenType = TokenType.USER
    name: Optional[str] = None
    app_id: Optional[str] = None


@dataclass
class LoginRequest(Model):
    email: str
    type: TokenType = TokenType.USER
    name: Optional[str] = None
    app_id: Optional[str] = None


@dataclass
class CreateTokenRequest(Model):
    type: TokenType
    name: Optional[str] = None


def _app_token(data: Dict[str, Any]) -> Token:
    return Token(token=data.get('app_token'))


class AuthClient:
    """Authentication service: signup/login and token management for the current account."""

    def __init__(self, http: Transport):
        self.http = http

    def signup(self, req: SignupRequest, ctx: Optional[CallContext] = None) -> Optional[Token]:
        return self.http.submit('/auth/signup', req, into=_app_token, ctx=ctx)

    def login(self, req: LoginRequest, ctx: Optional[CallContext] = None) -> Optional[Token]:
        return self.http.submit('/auth/login', req, into=_app_token, ctx=ctx)

    def logout(self, app_id: str = '', ctx: Optional[CallContext] = None) -> None:
        body = {'app_id': app_id} if app_id else {}
        self.http.submit('/auth/logout', body, ctx=ctx)

    def get_roles(self, ctx: Optional[CallContext] = None) -> Dict[str, Dict[str, str]]:
        return self.http.fetch('/auth/roles', into=dict, ctx=ctx) or {}

    def check_token(self, token: str, ctx: Optional[CallContext] = None) -> Optional[Token]:
        return self.http.fetch(f"/auth/check/{token}", into=Token.from_dict, ctx=ctx)

    def list_tokens(self, ctx: Optional[CallContext] = None) -> List[Token]:
        return self.http.fetch('/account/token', into=list_of(Token), ctx=ctx) or []

    def create_token(self, req: CreateTokenRequest, ctx: Optional[CallContext] = None) -> Optional[Token]:
        return self.http.submit('/account/token', req, into=Token.from_dict, ctx=ctx)

    def revoke_token(self, token: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/account/token/{token}", ctx=ctx)

    def delete_account(self, ctx: Optional[CallContext] = None) -> None:
        self.http.remove('/account/delete', ctx=ctx)
