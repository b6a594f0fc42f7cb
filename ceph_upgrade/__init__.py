import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_OSD_UPGRADE_TIMEOUT = 600  # seconds
DEFAULT_MDS_DEPLOYMENT_PREFIX = 'rook-ceph-mds-'


class UnloadedConfig(object):
    """
    This class is used as the default value for conf.ceph so that if
    a configuration file is not successfully loaded then it will give
    a nice error message when values from the config are used.
    """
    def __getattr__(self, *a):
        raise RuntimeError("No valid ceph configuration file was loaded.")


@dataclass
class Config:
    ceph: Any = UnloadedConfig()
    cluster: str = 'ceph'
    path: Optional[str] = None
    user: Optional[str] = None
    keyring: Optional[str] = None
    ceph_bin: str = 'ceph'
    osd_upgrade_timeout: int = DEFAULT_OSD_UPGRADE_TIMEOUT
    mds_deployment_prefix: str = DEFAULT_MDS_DEPLOYMENT_PREFIX
    log_path: str = ''
    verbosity: int = 0

conf = Config()

__version__ = "1.0.0"
