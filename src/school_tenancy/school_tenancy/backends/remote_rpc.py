from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..core.enums import BackendKind
from ..core.exceptions import RemoteBackendError
from ..sql.translator import translate
from .base import DatabaseBackend, RunResult

logger = logging.getLogger(__name__)


class RemoteRpcBackend(DatabaseBackend):
    """Proxies queries through PostgREST RPC functions on a hosted project.

    The database exposes ``exec_sql_run``, ``exec_sql_get`` and ``exec_sql_all``,
    each taking ``query_text`` (native SQL with ``$n`` markers) and
    ``query_params``. The service-role key is sent on every call.
    """

    kind = BackendKind.REMOTE_RPC

    def __init__(
        self,
        url: str,
        service_key: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
        sql_debug: bool = False,
    ):
        self._base_url = url.rstrip("/")
        self._timeout = timeout
        self._sql_debug = bool(sql_debug)
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
            }
        )

    def _rpc(self, function: str, sql: str, params: Sequence[Any], schema_name: Optional[str]) -> Any:
        query = translate(sql, params, strict=True)
        if self._sql_debug:
            logger.debug("[rpc:%s] %s params=%r", function, query.sql, query.params)

        payload: Dict[str, Any] = {"query_text": query.sql, "query_params": list(query.params)}
        if schema_name:
            payload["schema_name"] = schema_name

        try:
            response = self._session.post(
                f"{self._base_url}/rest/v1/rpc/{function}", json=payload, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise RemoteBackendError(f"RPC {function} failed: {exc}") from exc

        if not response.ok:
            raise RemoteBackendError(f"RPC {function} error ({response.status_code}): {response.text}")
        return response.json() if response.content else None

    def init(self) -> None:
        try:
            data = self._rpc("exec_sql_get", "SELECT NOW() as now", [], None)
            if isinstance(data, list):
                data = data[0] if data else None
            logger.info("Remote backend connection established: %s", (data or {}).get("now"))
            return
        except RemoteBackendError as exc:
            logger.warning("exec_sql_get unavailable (%s); querying schools table instead", exc)

        try:
            response = self._session.get(
                f"{self._base_url}/rest/v1/schools",
                params={"select": "id", "limit": 1},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise RemoteBackendError(f"Remote backend unreachable: {exc}") from exc
        if not response.ok:
            raise RemoteBackendError(f"Remote backend connection error ({response.status_code}): {response.text}")
        logger.info("Remote backend connection established (table query)")

    def run(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> RunResult:
        data = self._rpc("exec_sql_run", sql, params, schema_name) or {}
        return RunResult(id=data.get("id"), changes=int(data.get("changes") or 0))

    def get(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        data = self._rpc("exec_sql_get", sql, params, schema_name)
        if isinstance(data, list):
            return data[0] if data else None
        return data or None

    def all(self, sql: str, params: Sequence[Any] = (), *, schema_name: Optional[str] = None) -> List[Dict[str, Any]]:
        data = self._rpc("exec_sql_all", sql, params, schema_name)
        return list(data or [])
