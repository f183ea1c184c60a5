"""Python client for the whooktown platform (auth, sensors, layouts, camera, workflows, backoffice).

Usage example:
    from whooktown import Client, SensorData, Status
    client = Client.from_env()
    client.sensors.send(SensorData(id='0b6f...', status=Status.ONLINE, cpu_usage=42))
"""
from .client import Client  # noqa: F401
from .config import Config, Environment  # noqa: F401
from .context import CallContext  # noqa: F401
from .exceptions import (  # noqa: F401
    BadRequestError,
    ErrorCode,
    ForbiddenError,
    InternalServerError,
    NetworkError,
    NotFoundError,
    QuotaExceededError,
    QuotaLimitError,
    RequestTimeoutError,
    UnauthorizedError,
    ValidationError,
    WhooktownError,
    get_error_code,
    get_status_code,
    is_quota_exceeded,
)
from .models import (  # noqa: F401
    Activity,
    Building,
    CameraMode,
    Grid,
    Layout,
    Location,
    Mood,
    Orientation,
    SensorData,
    Speed,
    Status,
    TokenType,
    Vector3,
)
from .transport import Transport  # noqa: F401

__version__ = '0.1.0'
