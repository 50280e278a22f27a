from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field

# reported as the ETA of a queue with nothing pending
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class _WireModel(BaseModel):
    class Config:
        populate_by_name = True
        frozen = True


# ---------- Runtime ----------

class CPU(_WireModel):
    total: float = 0.0
    rate_1m: float = Field(0.0, alias="rate1M")  # consumption rate over one minute
    rate_10m: float = Field(0.0, alias="rate10M")  # consumption rate over ten minutes


class RAM(_WireModel):
    """Memory used by the instance, in megabytes."""
    current: float = 0.0
    average_1m: float = Field(0.0, alias="average1M")
    average_10m: float = Field(0.0, alias="average10M")


class RuntimeStats(_WireModel):
    cpu: CPU
    ram: RAM


# ---------- Deployment ----------

class ModuleInfo(_WireModel):
    name: str
    versions: List[str] = []


# ---------- Cache ----------

class CacheStats(_WireModel):
    hits: int = 0
    misses: int = 0
    byte_hits: int = Field(0, alias="byteHits")  # bytes transferred for gets
    items: int = 0
    bytes: int = 0  # size of all items currently in the cache
    oldest: int = 0  # age of access of the oldest item, in seconds


# ---------- Task queue ----------

class QueueStats(_WireModel):
    name: str
    tasks: int = 0  # may be an approximation
    oldest_eta: datetime = Field(ZERO_TIME, alias="oldestETA")  # ZERO_TIME when nothing is pending
    executed_1_minute: int = Field(0, alias="executed1Minute")
    in_flight: int = Field(0, alias="inFlight")
    enforced_rate: float = Field(0.0, alias="enforcedRate")  # tasks per second


# ---------- Caller ----------

class CallerInfo(_WireModel):
    remote_addr: str = Field("", alias="remoteAddr")
    user_agent: str = Field("", alias="userAgent")
    country: str = ""
    region: str = ""
    city: str = ""
    city_lat_long: str = Field("", alias="cityLatLong")
    email: str = ""


# ---------- Snapshot ----------

class Info(_WireModel):
    app_id: str = Field(..., alias="appID")
    datacenter: str
    default_version_hostname: str = Field(..., alias="defaultVersionHostname")
    instance_id: str = Field(..., alias="instanceID")
    is_dev_app_server: bool = Field(..., alias="isDevAppServer")
    module_name: str = Field(..., alias="moduleName")
    server_software: str = Field(..., alias="serverSoftware")
    version_id: str = Field(..., alias="versionID")
    server_time: datetime = Field(..., alias="serverTime")
    runtime_version: str = Field(..., alias="goVersion")
    cpu: CPU
    ram: RAM
    modules: List[ModuleInfo]
    memcache: CacheStats
    taskqueue: QueueStats
    caller: CallerInfo
