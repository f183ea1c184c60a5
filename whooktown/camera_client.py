from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .context import CallContext
from .models import CameraMode, Model, Orientation, Vector3
from .transport import Transport


@dataclass
class CameraCommand(Model):
    command: str  # position, preset, mode, sequence, path
    layout_id: str
    position: Optional[Vector3] = None
    rotation: Optional[Vector3] = None
    fov: Optional[float] = None
    animate: Optional[bool] = None
    duration: Optional[float] = None
    preset_id: Optional[str] = None
    mode: Optional[CameraMode] = None
    flyover_speed: Optional[float] = None
    action: Optional[str] = None  # play, pause, stop
    path_id: Optional[str] = None
    sequence_id: Optional[str] = None


@dataclass
class CreatePresetRequest(Model):
    layout_id: str
    name: str
    position_x: float = 0.0
    position_y: float = 0.0
    position_z: float = 0.0
    rotation_x: float = 0.0
    rotation_y: float = 0.0
    rotation_z: float = 0.0
    fov: Optional[float] = None
    mode: Optional[CameraMode] = None


@dataclass
class UpdatePresetRequest(Model):
    name: Optional[str] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    position_z: Optional[float] = None
    rotation_x: Optional[float] = None
    rotation_y: Optional[float] = None
    rotation_z: Optional[float] = None
    fov: Optional[float] = None
    mode: Optional[CameraMode] = None


@dataclass
class CreatePathRequest(Model):
    layout_id: str
    name: str
    description: Optional[str] = None
    loop: Optional[bool] = None


@dataclass
class UpdatePathRequest(Model):
    name: Optional[str] = None
    description: Optional[str] = None
    loop: Optional[bool] = None


@dataclass
class CheckpointRequest(Model):
    grid_x: int
    grid_y: int
    orientation: Optional[Orientation] = None
    altitude: Optional[int] = None  # 0-100
    tilt: Optional[int] = None  # -90..90
    zoom: Optional[int] = None  # 30-120 (fov)
    transition_duration: Optional[float] = None
    hold_duration: Optional[float] = None


class CameraClient:
    """Live camera commands plus saved presets and checkpoint paths."""

    def __init__(self, http: Transport):
        self.http = http

    def send_command(self, cmd: CameraCommand, ctx: Optional[CallContext] = None) -> None:
        self.http.submit('/ui/camera/command', cmd, ctx=ctx)

    def set_position(self, layout_id: str, position: Vector3, rotation: Optional[Vector3] = None,
                     fov: Optional[float] = None, animate: bool = False, duration: Optional[float] = None,
                     ctx: Optional[CallContext] = None) -> None:
        self.send_command(CameraCommand(command='position', layout_id=layout_id, position=position,
                                        rotation=rotation, fov=fov, animate=animate or None,
                                        duration=duration), ctx=ctx)

    def set_mode(self, layout_id: str, mode: CameraMode, flyover_speed: Optional[float] = None,
                 ctx: Optional[CallContext] = None) -> None:
        self.send_command(CameraCommand(command='mode', layout_id=layout_id, mode=CameraMode(mode),
                                        flyover_speed=flyover_speed), ctx=ctx)

    def go_to_preset(self, layout_id: str, preset_id: str, animate: bool = False, duration: Optional[float] = None,
                     ctx: Optional[CallContext] = None) -> None:
        self.send_command(CameraCommand(command='preset', layout_id=layout_id, preset_id=preset_id,
                                        animate=animate or None, duration=duration), ctx=ctx)

    def play_path(self, layout_id: str, path_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(CameraCommand(command='path', layout_id=layout_id, path_id=path_id, action='play'),
                          ctx=ctx)

    def pause_path(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(CameraCommand(command='path', layout_id=layout_id, action='pause'), ctx=ctx)

    def stop_path(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(CameraCommand(command='path', layout_id=layout_id, action='stop'), ctx=ctx)

    # Presets

    def list_presets(self, layout_id: str, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch(f"/ui/presets/{layout_id}", into=list, ctx=ctx) or []

    def create_preset(self, req: CreatePresetRequest, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.submit('/ui/presets', req, into=dict, ctx=ctx)

    def update_preset(self, preset_id: str, req: UpdatePresetRequest,
                      ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.replace(f"/ui/presets/{preset_id}", req, into=dict, ctx=ctx)

    def delete_preset(self, preset_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/ui/presets/{preset_id}", ctx=ctx)

    def set_default_preset(self, preset_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.submit(f"/ui/presets/{preset_id}/default", ctx=ctx)

    # Paths

    def list_paths(self, layout_id: str, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch(f"/ui/paths/{layout_id}", into=list, ctx=ctx) or []

    def get_path(self, layout_id: str, path_id: str, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.fetch(f"/ui/paths/{layout_id}/{path_id}", into=dict, ctx=ctx)

    def create_path(self, req: CreatePathRequest, ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.submit('/ui/paths', req, into=dict, ctx=ctx)

    def update_path(self, path_id: str, req: UpdatePathRequest,
                    ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.replace(f"/ui/paths/{path_id}", req, into=dict, ctx=ctx)

    def delete_path(self, path_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/ui/paths/{path_id}", ctx=ctx)

    def add_checkpoint(self, path_id: str, req: CheckpointRequest,
                       ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.submit(f"/ui/paths/{path_id}/checkpoints", req, into=dict, ctx=ctx)

    def update_checkpoint(self, path_id: str, checkpoint_id: str, req: CheckpointRequest,
                          ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        return self.http.replace(f"/ui/paths/{path_id}/checkpoints/{checkpoint_id}", req, into=dict, ctx=ctx)

    def delete_checkpoint(self, path_id: str, checkpoint_id: str, ctx: Optional[CallContext] = None) -> None:
        self.http.remove(f"/ui/paths/{path_id}/checkpoints/{checkpoint_id}", ctx=ctx)

    def reorder_checkpoints(self, path_id: str, checkpoint_ids: List[str],
                            ctx: Optional[CallContext] = None) -> Optional[Dict[str, Any]]:
        body = {'checkpoint_ids': [str(c) for c in checkpoint_ids]}
        return self.http.replace(f"/ui/paths/{path_id}/checkpoints/reorder", body, into=dict, ctx=ctx)
