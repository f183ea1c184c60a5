from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from .context import CallContext
from .models import CameraMode, SensorData, Speed, TrafficState, list_of
from .transport import Transport


class SensorsClient:
    """Sensor ingestion endpoint (also accepts camera and traffic state pushes)."""

    def __init__(self, http: Transport):
        self.http = http

    def send(self, data: SensorData, ctx: Optional[CallContext] = None) -> None:
        self.http.submit('/sensors', data, ctx=ctx)

    def send_raw(self, data: Dict[str, Any], ctx: Optional[CallContext] = None) -> None:
        self.http.submit('/sensors', data, ctx=ctx)

    def send_multiple(self, items: Iterable[SensorData], ctx: Optional[CallContext] = None) -> None:
        """Send readings one by one; the first failure stops the batch."""
        for item in items:
            self.send(item, ctx=ctx)

    def health(self, ctx: Optional[CallContext] = None) -> None:
        self.http.fetch('/sensors/_health', ctx=ctx)

    def set_camera_mode(self, layout_id: str, mode: CameraMode, flyover_speed: float = 0,
                        ctx: Optional[CallContext] = None) -> None:
        body: Dict[str, Any] = {'layout_id': layout_id, 'mode': CameraMode(mode).value}
        if flyover_speed > 0:
            body['flyover_speed'] = flyover_speed
        self.http.submit('/camera', body, ctx=ctx)

    def get_camera_states(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/camera', into=list, ctx=ctx) or []

    def set_traffic_state(self, layout_id: str, density: int, speed: Speed, enabled: bool,
                          ctx: Optional[CallContext] = None) -> None:
        body = {
            'layout_id': layout_id,
            'density': density,
            'speed': Speed(speed).value,
            'enabled': enabled,
        }
        self.http.submit('/traffic', body, ctx=ctx)

    def get_traffic_states(self, ctx: Optional[CallContext] = None) -> List[TrafficState]:
        return self.http.fetch('/traffic', into=list_of(TrafficState), ctx=ctx) or []
