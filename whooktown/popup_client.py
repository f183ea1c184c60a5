from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from .context import CallContext
from .models import Model
from .transport import Transport


@dataclass
class PopupCommand(Model):
    layout_id: str
    command: str  # labels, detail, close, close_all
    building_ids: Optional[List[str]] = None
    enabled: Optional[bool] = None


class PopupClient:
    """Building labels and detail popups."""

    def __init__(self, http: Transport):
        self.http = http

    def send_command(self, cmd: PopupCommand, ctx: Optional[CallContext] = None) -> None:
        self.http.submit('/ui/popup/command', cmd, ctx=ctx)

    def toggle_labels(self, layout_id: str, enabled: bool, ctx: Optional[CallContext] = None) -> None:
        self.send_command(PopupCommand(layout_id, 'labels', enabled=enabled), ctx=ctx)

    def show_labels(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.toggle_labels(layout_id, True, ctx=ctx)

    def hide_labels(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.toggle_labels(layout_id, False, ctx=ctx)

    def show_detail(self, layout_id: str, building_ids: List[str], ctx: Optional[CallContext] = None) -> None:
        self.send_command(PopupCommand(layout_id, 'detail', building_ids=[str(b) for b in building_ids]), ctx=ctx)

    def close_detail(self, layout_id: str, building_ids: List[str], ctx: Optional[CallContext] = None) -> None:
        self.send_command(PopupCommand(layout_id, 'close', building_ids=[str(b) for b in building_ids]), ctx=ctx)

    def close_all_details(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(PopupCommand(layout_id, 'close_all'), ctx=ctx)
