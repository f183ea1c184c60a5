from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .context import CallContext
from .models import Model, Mood
from .transport import Transport


@dataclass
class AudioCommand(Model):
    command: str  # play, stop, volume, mood, toggle
    layout_id: str
    mood: Optional[Mood] = None
    music_volume: Optional[int] = None  # 0-100
    sfx_volume: Optional[int] = None  # 0-100
    enabled: Optional[bool] = None
    auto_mood: Optional[bool] = None


class AudioClient:
    def __init__(self, http: Transport):
        self.http = http

    def send_command(self, cmd: AudioCommand, ctx: Optional[CallContext] = None) -> None:
        self.http.submit('/ui/audio/command', cmd, ctx=ctx)

    def play(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('play', layout_id), ctx=ctx)

    def stop(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('stop', layout_id), ctx=ctx)

    def set_mood(self, layout_id: str, mood: Mood, ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('mood', layout_id, mood=Mood(mood)), ctx=ctx)

    def set_volume(self, layout_id: str, music_volume: Optional[int] = None, sfx_volume: Optional[int] = None,
                   ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('volume', layout_id, music_volume=music_volume, sfx_volume=sfx_volume),
                          ctx=ctx)

    def set_music_volume(self, layout_id: str, volume: int, ctx: Optional[CallContext] = None) -> None:
        self.set_volume(layout_id, music_volume=volume, ctx=ctx)

    def set_sfx_volume(self, layout_id: str, volume: int, ctx: Optional[CallContext] = None) -> None:
        self.set_volume(layout_id, sfx_volume=volume, ctx=ctx)

    def enable(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('toggle', layout_id, enabled=True), ctx=ctx)

    def disable(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('toggle', layout_id, enabled=False), ctx=ctx)

    def enable_auto_mood(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('toggle', layout_id, auto_mood=True), ctx=ctx)

    def disable_auto_mood(self, layout_id: str, ctx: Optional[CallContext] = None) -> None:
        self.send_command(AudioCommand('toggle', layout_id, auto_mood=False), ctx=ctx)

    def get_states(self, ctx: Optional[CallContext] = None) -> List[Dict[str, Any]]:
        return self.http.fetch('/ui/audio', into=list, ctx=ctx) or []
