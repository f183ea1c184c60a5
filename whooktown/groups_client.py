from __future__ import annotations
from typing import Any, Dict, List, Optional

from .context import CallContext
from .transport import Transport


class GroupsClient:
    """Asset groups: named sets of buildings inside a layout."""

    def __init__(self, http: Transport):
        self.http = http

    def list_groups(self, layout_id: str, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch(f"/ui/groups/{layout_id}", into=list, ctx=ctx) or []

    def create_group(self, layout_id: str, name: str, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        body = {'layout_id': str(layout_id), 'name': name}
        return self.http.submit('/ui/groups', body, into=dict, ctx=ctx)

    def update_group(self, group_id: str, name: str = '', ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        body = {'name': name} if name else {}
        return self.http.replace(f"/ui/groups/{group_id}", body, into=dict, ctx=ctx)

    def delete_group(self, group_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/ui/groups/{group_id}", ctx=ctx)

    def add_member(self, group_id: str, building_id: str, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        body = {'building_id': str(building_id)}
        return self.http.submit(f"/ui/groups/{group_id}/members", body, into=dict, ctx=ctx)

    def remove_member(self, group_id: str, building_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/ui/groups/{group_id}/members/{building_id}", ctx=ctx)
