from __future__ import annotations

from typing import Optional

import requests

from ..core.errors import ExportError
from ..core.logging_config import logger
from ..schemas.export_v1 import ExportRequestV1


class EsxExportClient:
    """Client for the remote service converting an export payload to an ESX file."""

    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def create_esx(self, payload: ExportRequestV1) -> bytes:
        if not self.enabled:
            raise ExportError("ESX export server URL is not configured.")

        url = f"{self.base_url}/create-esx"
        log = logger.bind(url=url, project=payload.project.name, items=len(payload.line_items))

        try:
            response = self.session.post(url, json=payload.to_wire(), timeout=self.timeout)
        except requests.Timeout as e:
            log.error("esx_export_timeout", timeout=self.timeout)
            raise ExportError(f"ESX export timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            log.error("esx_export_unreachable", error=str(e))
            raise ExportError(f"ESX export server unreachable: {e}") from e

        if not 200 <= response.status_code < 300:
            log.error("esx_export_failed", status_code=response.status_code)
            raise ExportError(
                f"ESX export failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        log.info("esx_export_ok", size=len(response.content))
        return response.content
