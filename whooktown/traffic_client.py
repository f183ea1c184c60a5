from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from .context import CallContext
from .models import Model, Speed, TrafficState, list_of
from .transport import Transport


@dataclass
class TrafficCommand(Model):
    layout_id: str
    density: Optional[int] = None  # 0-100
    speed: Optional[Speed] = None
    enabled: Optional[bool] = None


class TrafficClient:
    def __init__(self, http: Transport):
        self.http = http

    def send_command(self, cmd: TrafficCommand, ctx: Optional[CallContext] = None) -> None:
        self.http.submit('/ui/traffic/command', cmd, ctx=ctx)

    def set_traffic(self, layout_id: str, density: int, speed: Speed, enabled: bool,
                    ctx: Optional[CallContext] = None) -> None:
        self.send_command(TrafficCommand(layout_id, density=density, speed=Speed(speed), enabled=enabled), ctx=ctx)

    def set_density(self, layout_id: str, density: int, ctx: Optional[CallContext] = None) -> None:
        self.send_command(TrafficCommand(layout_id, density=density), ctx=ctx)

    def set_speed(self, layout_id: str, speed: Speed, ctx: Optional[CallContext] = None) -> None:
        self.send_command(TrafficCommand(layout_id, speed=Speed(speed)), ctx=ctx)

    def enable(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(TrafficCommand(layout_id, enabled=True), ctx=ctx)

    def disable(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(TrafficCommand(layout_id, enabled=False), ctx=ctx)

    def get_states(self, ctx: Optional[CallContext] = None) -> List[TrafficState]:
        return self.http.fetch('/ui/traffic', into=list_of(TrafficState), ctx=ctx) or []
