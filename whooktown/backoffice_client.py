from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .context import CallContext
from .models import Model, Token, TokenType, list_of
from .transport import Transport


@dataclass
class CreateAccountRequest(Model):
    email: str
    type: TokenType = TokenType.USER
    name: Optional[str] = None


@dataclass
class UpdateAccountRequest(Model):
    email: Optional[str] = None
    validated: Optional[bool] = None


def format_duration(seconds: float) -> str:
    """Render seconds the way the backoffice parses durations, e.g. ``720h0m0s``."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


class BackofficeClient:
    """Admin API, authenticated with the X-Admin-Token secret."""

    def __init__(self, http: Transport):
        self.http = http

    def health(self, ctx: Optional[CallContext] = None) -> None:
        self.http.fetch('/api/health', ctx=ctx)

    def get_stats(self, ctx: Optional[CallContext] = None) -> Dict[str, Any]:
        return self.http.fetch('/api/stats', into=dict, ctx=ctx) or {}

    # Accounts

    def list_accounts(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/api/accounts', into=list, ctx=ctx) or []

    def get_account(self, account_id: str, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.fetch(f"/api/accounts/{account_id}", into=dict, ctx=ctx)

    def create_account(self, req: CreateAccountRequest, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.submit('/api/accounts', req, into=dict, ctx=ctx)

    def update_account(self, account_id: str, req: UpdateAccountRequest,
                       ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.replace(f"/api/accounts/{account_id}", req, into=dict, ctx=ctx)

    def delete_account(self, account_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/api/accounts/{account_id}", ctx=ctx)

    def lock_account(self, account_id: str, reason: str = '', ctx: Optional[CallContext] = None) -> None:
        body = {'reason': reason} if reason else {}
        self.http.replace(f"/api/accounts/{account_id}/lock", body, ctx=ctx)

    def unlock_account(self, account_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.replace(f"/api/accounts/{account_id}/unlock", ctx=ctx)

    # Tokens

    def list_account_tokens(self, account_id: str, ctx: Optional[CallContext] = None) -> List[Token]:
        return self.http.fetch(f"/api/accounts/{account_id}/tokens", into=list_of(Token), ctx=ctx) or []

    def create_account_token(self, account_id: str, token_type: TokenType, name: str = '',
                             expiration: Optional[float] = None, ctx: Optional[CallContext] = None) -> Optional[Token]:
        body: Dict[str, Any] = {'type': TokenType(token_type).value}
        if name:
            body['name'] = name
        if expiration and expiration > 0:
            body['expiration'] = format_duration(expiration)
        return self.http.submit(f"/api/accounts/{account_id}/tokens", body, into=Token.from_dict, ctx=ctx)

    def delete_token(self, token: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/api/tokens/{token}", ctx=ctx)

    # Layouts

    def list_account_layouts(self, account_id: str, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch(f"/api/accounts/{account_id}/layouts", into=list, ctx=ctx) or []

    def delete_account_layout(self, account_id: str, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/api/accounts/{account_id}/layouts/{layout_id}", ctx=ctx)

    # Subscriptions

    def get_subscription_stats(self, ctx: Optional[CallContext] = None) -> Dict[str, Any]:
        return self.http.fetch('/api/subscriptions/stats', into=dict, ctx=ctx) or {}

    def list_subscriptions(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/api/subscriptions', into=list, ctx=ctx) or []

    def list_plans(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/api/subscriptions/plans', into=list, ctx=ctx) or []

    def get_account_subscription(self, account_id: str, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.fetch(f"/api/accounts/{account_id}/subscription", into=dict, ctx=ctx)

    def update_account_subscription(self, account_id: str, plan_id: str,
                                    ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.replace(f"/api/accounts/{account_id}/subscription", {'plan_id': plan_id}, into=dict, ctx=ctx)

    # Asset types

    def list_asset_types(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/api/asset-types', into=list, ctx=ctx) or []

    def update_asset_type(self, type_name: str, enabled: bool,
                          ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.replace(f"/api/asset-types/{type_name}", {'enabled': enabled}, into=dict, ctx=ctx)
