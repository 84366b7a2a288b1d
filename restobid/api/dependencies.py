from __future__ import annotations

from functools import lru_cache

from ..core.settings import get_settings
from ..domain.dataset import ReferenceDataset
from ..engine.session import Clock, utc_now
from ..export.esx_client import EsxExportClient
from ..storage.loader import get_reference_dataset
from ..storage.project_store import JsonFileProjectStore, ProjectStore


def get_dataset() -> ReferenceDataset:
    s = get_settings()
    return get_reference_dataset(str(s.reference_data_dir), str(s.rule_set_path))


@lru_cache
def get_store() -> ProjectStore:
    return JsonFileProjectStore(get_settings().project_store_dir)


def get_clock() -> Clock:
    return utc_now


def get_esx_client() -> EsxExportClient:
    s = get_settings()
    return EsxExportClient(s.esx_server_url, timeout=s.esx_timeout_seconds)
