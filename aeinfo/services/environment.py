import platform
import socket
import uuid
from datetime import datetime, timezone

from aeinfo.core.config import Settings


class SettingsEnvironment:
    """
    Instance identity read from configuration.
    Values that are not configured fall back to what the host can tell us.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._instance_id = settings.INSTANCE_ID or uuid.uuid4().hex
        self._hostname = settings.DEFAULT_VERSION_HOSTNAME or socket.gethostname()

    def app_id(self) -> str:
        return self._settings.APP_ID

    def datacenter(self) -> str:
        return self._settings.DATACENTER

    def default_version_hostname(self) -> str:
        return self._hostname

    def instance_id(self) -> str:
        return self._instance_id

    def is_dev_app_server(self) -> bool:
        return self._settings.DEV_APP_SERVER

    def module_name(self) -> str:
        return self._settings.MODULE_NAME

    def server_software(self) -> str:
        return self._settings.SERVER_SOFTWARE

    def version_id(self) -> str:
        return self._settings.VERSION_ID

    def runtime_version(self) -> str:
        return "python" + platform.python_version()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
