from __future__ import annotations
import dataclasses
import logging
from typing import Any, List, Optional

import requests

from .audio_client import AudioClient
from .auth_client import AuthClient
from .backoffice_client import BackofficeClient
from .camera_client import CameraClient
from .config import Config
from .groups_client import GroupsClient
from .popup_client import PopupClient
from .sensors_client import SensorsClient
from .traffic_client import TrafficClient
from .transport import Transport
from .ui_client import UIClient
from .workflow_client import WorkflowClient

logger = logging.getLogger(__name__)


class Client:
    """Entry point: one shared HTTP session, one transport per service.

    Usage:
        with Client.from_env() as client:
            client.sensors.send(SensorData(id=sensor_id, status=Status.ONLINE))
    """

    def __init__(self, config: Optional[Config] = None, **overrides: Any):
        cfg = config or Config.default()
        if overrides:
            cfg = dataclasses.replace(cfg, **overrides)
        cfg.validate()
        self._config = cfg
        if cfg.debug:
            logging.getLogger('whooktown').setLevel(logging.DEBUG)
        self._owns_session = cfg.session is None
        self.session = cfg.session if cfg.session is not None else requests.Session()

        auth_http = self._transport(cfg.auth_url, token=cfg.token)
        sensor_http = self._transport(cfg.sensor_url, token=cfg.token)
        ui_http = self._transport(cfg.ui_url, token=cfg.token)
        workflow_http = self._transport(cfg.workflow_url, token=cfg.token)
        backoffice_http = self._transport(cfg.backoffice_url, admin_token=cfg.admin_secret)
        self._bearer_transports: List[Transport] = [auth_http, sensor_http, ui_http, workflow_http]
        self._admin_transport = backoffice_http

        self.auth = AuthClient(auth_http)
        self.sensors = SensorsClient(sensor_http)
        self.ui = UIClient(ui_http)
        self.camera = CameraClient(ui_http)
        self.traffic = TrafficClient(ui_http)
        self.popup = PopupClient(ui_http)
        self.groups = GroupsClient(ui_http)
        self.audio = AudioClient(ui_http)
        self.workflow = WorkflowClient(workflow_http)
        self.backoffice = BackofficeClient(backoffice_http)
        logger.debug("Client ready (ui=%s, sensors=%s, retries=%d)", cfg.ui_url, cfg.sensor_url, cfg.max_retries)

    @classmethod
    def from_env(cls, **overrides: Any) -> 'Client':
        return cls(Config.from_env(), **overrides)

    def _transport(self, base_url: str, token: str = '', admin_token: str = '') -> Transport:
        cfg = self._config
        return Transport(
            base_url,
            session=self.session,
            token=token,
            admin_token=admin_token,
            max_retries=cfg.max_retries,
            retry_wait=cfg.retry_wait,
            timeout=cfg.timeout,
            debug=cfg.debug,
        )

    @property
    def config(self) -> Config:
        return self._config

    def set_token(self, token: str) -> None:
        """Rotate the bearer token on every user-facing service."""
        self._config = dataclasses.replace(self._config, token=token)
        for transport in self._bearer_transports:
            transport.set_token(token)

    def set_admin_secret(self, secret: str) -> None:
        self._config = dataclasses.replace(self._config, admin_secret=secret)
        self._admin_transport.set_admin_token(secret)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> 'Client':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
