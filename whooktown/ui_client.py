from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .context import CallContext
from .models import Layout, Model
from .transport import Transport


@dataclass
class SceneStateRequest(Model):
    layout_id: str
    flyover_enabled: Optional[bool] = None
    flyover_speed: Optional[int] = None
    active_path_id: Optional[str] = None


class UIClient:
    """Layout management and connected scene control."""

    def __init__(self, http: Transport):
        self.http = http

    def create_layout(self, layout: Layout, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        """Create or replace a layout; returns the stored record (``layout_id``, ``data``, ...)."""
        return self.http.submit('/ui/layout', layout, into=dict, ctx=ctx)

    def update_layout(self, layout: Layout, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        # the endpoint is an upsert
        return self.create_layout(layout, ctx=ctx)

    def delete_layout(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/ui/layout/{layout_id}", ctx=ctx)

    def get_quota(self, ctx: Optional[CallContext] = None) -> Dict[str, Any]:
        return self.http.fetch('/ui/quota', into=dict, ctx=ctx) or {}

    def get_archived_layouts(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/ui/layout/archived', into=list, ctx=ctx) or []

    def restore_layout(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.submit(f"/ui/layout/{layout_id}/restore", ctx=ctx)

    def list_scenes(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/ui/scenes', into=list, ctx=ctx) or []

    def update_scene_state(self, scene_id: str, req: SceneStateRequest, ctx: Optional[CallContext] = None) -> None:
        self.http.submit(f"/ui/scene/{scene_id}/state", req, ctx=ctx)
