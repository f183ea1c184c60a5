"""Request and response types shared by the service clients.

Dataclasses serialize through ``to_dict``: fields left as ``None`` are omitted
from the JSON body and ``json_name`` metadata gives the wire name where it
differs from the attribute. ``from_dict`` ignores unknown keys.
"""
from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


def json_name(name: str, **kwargs: Any) -> Any:
    return field(metadata={'json': name}, **kwargs)


def _to_json(value: Any) -> Any:
    if isinstance(value, Model):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    return value


class Model:
    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[f.metadata.get('json', f.name)] = _to_json(value)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} expects a JSON object, got {type(data).__name__}")
        kwargs = {}
        for f in dataclasses.fields(cls):
            key = f.metadata.get('json', f.name)
            if key in data:
                kwargs[f.name] = data[key]
        return cls(**kwargs)


class Status(str, Enum):
    ONLINE = 'online'
    OFFLINE = 'offline'
    WARNING = 'warning'
    CRITICAL = 'critical'


class Activity(str, Enum):
    SLOW = 'slow'
    NORMAL = 'normal'
    FAST = 'fast'


class Speed(str, Enum):
    SLOW = 'slow'
    NORMAL = 'normal'
    FAST = 'fast'


class CameraMode(str, Enum):
    ORBIT = 'orbit'
    FPS = 'fps'
    FLYOVER = 'flyover'


class Orientation(str, Enum):
    N = 'N'
    NE = 'NE'
    E = 'E'
    SE = 'SE'
    S = 'S'
    SW = 'SW'
    W = 'W'
    NW = 'NW'


class TokenType(str, Enum):
    ADMIN = 'admin'
    USER = 'user'
    VIEWER = 'viewer'
    SENSOR = 'sensor'


class Mood(str, Enum):
    CALM = 'calm'
    ACTIVE = 'active'
    TENSION = 'tension'
    CRITICAL = 'critical'
    EPIC = 'epic'


BUILDING_TYPES = (
    'windmill', 'data_center', 'arcade', 'pyramid', 'tower_a', 'tower_b', 'supervisor', 'bank',
    'monitor_tube', 'bakery', 'house_a', 'house_b', 'house_c', 'tree', 'display_a', 'traffic_light',
    'farm_building_a', 'farm_building_b', 'farm_silo', 'farm_field_a', 'farm_field_b', 'farm_cattle_a',
    'grass', 'spire', 'led_facade', 'twin_towers', 'diamond_tower',
)


@dataclass
class Band(Model):
    name: str
    value: int


@dataclass
class SensorData(Model):
    """One sensor reading. Building specific fields are optional; ``extra``
    entries are merged into the payload without overriding known fields."""
    id: str
    status: Optional[Status] = None
    activity: Optional[Activity] = None
    quantity: Optional[str] = None  # bank: none, low, medium, full
    amount: Optional[int] = None
    text1: Optional[str] = None
    text2: Optional[str] = None
    text3: Optional[str] = None
    tower_text: Optional[str] = json_name('towerText', default=None)
    tower_b_text: Optional[str] = json_name('towerBText', default=None)
    ring_count: Optional[int] = json_name('ringCount', default=None)
    dancer_enabled: Optional[bool] = json_name('dancerEnabled', default=None)
    music_enabled: Optional[bool] = json_name('musicEnabled', default=None)
    sign_text: Optional[str] = json_name('signText', default=None)
    face_rotation: Optional[bool] = json_name('faceRotationEnabled', default=None)
    cpu_usage: Optional[int] = json_name('cpuUsage', default=None)  # 0-100
    ram_usage: Optional[int] = json_name('ramUsage', default=None)
    network_traffic: Optional[int] = json_name('networkTraffic', default=None)
    active_connections: Optional[int] = json_name('activeConnections', default=None)
    temperature: Optional[int] = None  # celsius
    alert_level: Optional[str] = json_name('alertLevel', default=None)
    band_count: Optional[int] = json_name('bandCount', default=None)  # 3-7
    bands: Optional[List[Band]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.pop('extra', None)
        data['id'] = str(self.id)
        for key, value in self.extra.items():
            data.setdefault(key, _to_json(value))
        return data


@dataclass
class Grid(Model):
    width: int
    height: int


@dataclass
class Location(Model):
    x: int
    y: int


@dataclass
class Vector3(Model):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Building(Model):
    id: str
    type: str
    location: Location
    name: Optional[str] = None
    roles: Optional[List[str]] = None
    orientation: Optional[Orientation] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None


@dataclass
class Layout(Model):
    name: str
    grid: Grid
    buildings: List[Building] = field(default_factory=list)
    id: Optional[str] = None
    roads: Optional[Any] = None  # opaque, passed through as-is


@dataclass
class Token(Model):
    token: Optional[str] = json_name('app_token', default=None)
    validation_link: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    roles: Optional[Dict[str, str]] = None
    account_id: Optional[str] = None
    account: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    expired_at: Optional[str] = None


@dataclass
class TrafficState(Model):
    layout_id: str = ''
    density: int = 0
    speed: str = ''
    enabled: bool = False
    labels_visible: bool = False


@dataclass
class Workflow(Model):
    id: str = ''
    name: str = ''
    account_id: Optional[str] = None
    worker: Optional[str] = None
    version: Optional[str] = None
    graph: Optional[Any] = None
    enabled: bool = False
    created_at: Optional[str] = None


def list_of(model: type):
    """Decoder for a JSON array of ``model`` objects."""
    def decode(items: Any) -> List[Any]:
        if items is None:
            return []
        if not isinstance(items, list):
            raise TypeError(f"expected a JSON array of {model.__name__}")
        return [model.from_dict(item) for item in items]
    return decode
