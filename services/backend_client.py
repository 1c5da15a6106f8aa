# services/backend_client.py
from fastapi import HTTPException
from typing import List, Dict, Any, Optional
from models.layout import AppMeta, QueryMeta
from models.session import SessionContext
import config
import httpx
import logging

logger = logging.getLogger(__name__)

class BackendClient:
    """Thin client for the application backend's /apps endpoints.

    Every call unwraps the ``{success, data, error}`` envelope. Failures are
    raised as HTTPException: 504 for timeouts, 502 for transport errors and
    ``success: false`` replies, and the backend's own status for 4xx replies.
    """

    def __init__(self, session: Optional[SessionContext] = None,
                 base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.session = session or SessionContext()
        self.base_url = (base_url or config.BACKEND_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.BACKEND_TIMEOUT_SECS
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self.transport)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }
        if self.session.access_token:
            headers["Authorization"] = f"Bearer {self.session.access_token}"
        return headers

    async def _refresh_session(self, client: httpx.AsyncClient) -> bool:
        """Exchange the refresh token for a new access token; False if not possible"""
        if not self.session.refresh_token:
            return False

        try:
            response = await client.post(
                "/auth/refresh",
                headers={
                    "Accept": "application/json",
                    "Cookie": f"refreshToken={self.session.refresh_token}"
                },
                timeout=self.timeout
            )
        except httpx.RequestError as e:
            logger.error(f"Token refresh failed: {str(e)}")
            return False

        if response.status_code != 200:
            logger.warning(f"Token refresh rejected with status {response.status_code}")
            return False

        access_token = response.cookies.get("accessToken")
        if not access_token:
            try:
                access_token = (response.json().get("data") or {}).get("accessToken")
            except ValueError:
                access_token = None

        if not access_token:
            logger.warning("Token refresh response did not contain an access token")
            return False

        self.session.access_token = access_token
        logger.info("Access token refreshed")
        return True

    async def _request(self, method: str, path: str, json: Any = None,
                       timeout: Optional[float] = None) -> Any:
        timeout = timeout if timeout is not None else self.timeout

        async with self._client() as client:
            try:
                response = await client.request(method, path, json=json, headers=self._headers(), timeout=timeout)

                # one refresh-and-retry per request
                if response.status_code == 401 and await self._refresh_session(client):
                    response = await client.request(method, path, json=json, headers=self._headers(), timeout=timeout)

                logger.debug(f"{method} {path} -> {response.status_code}")
                response.raise_for_status()

                try:
                    body = response.json()
                except ValueError:
                    raise HTTPException(
                        status_code=502,
                        detail=f"Backend did not return valid JSON: {response.text[:200]}"
                    )

            except httpx.TimeoutException:
                raise HTTPException(
                    status_code=504,
                    detail=f"Backend request timed out: {method} {path}"
                )
            except httpx.HTTPStatusError as e:
                try:
                    error_json = e.response.json()
                    if isinstance(error_json, dict):
                        error_detail = error_json.get('error') or error_json.get('detail') or str(error_json)
                    else:
                        error_detail = str(error_json)
                except ValueError:
                    error_detail = e.response.text[:200]

                logger.error(f"Backend returned error for {method} {path}: {error_detail}")
                status_code = e.response.status_code if e.response.status_code < 500 else 502
                raise HTTPException(
                    status_code=status_code,
                    detail=f"Backend returned error: {error_detail}"
                )
            except httpx.RequestError as e:
                raise HTTPException(
                    status_code=502,
                    detail=f"Failed to communicate with backend: {str(e)}"
                )

        if not isinstance(body, dict) or not body.get("success"):
            error_detail = body.get("error") if isinstance(body, dict) else None
            raise HTTPException(
                status_code=502,
                detail=error_detail or "Unknown error"
            )

        return body.get("data")

    async def get_app(self, app_id: str) -> AppMeta:
        data = await self._request("GET", f"/apps/{app_id}")
        return AppMeta.model_validate(data or {})

    async def get_layout(self, app_id: str) -> List[Dict[str, Any]]:
        data = await self._request("GET", f"/apps/{app_id}/layout")
        layout = (data or {}).get("layout")
        if not isinstance(layout, list):
            return []
        return layout

    async def put_layout(self, app_id: str, layout: List[Dict[str, Any]]) -> None:
        await self._request("PUT", f"/apps/{app_id}/layout", json={"layout": layout})

    async def execute_query(self, app_id: str, query_id: str,
                            parameters: Optional[Dict[str, Any]] = None,
                            timeout: Optional[float] = None) -> List[Dict[str, Any]]:
        data = await self._request(
            "POST",
            f"/apps/{app_id}/queries/{query_id}/execute",
            json={"parameters": parameters or {}},
            timeout=timeout if timeout is not None else config.QUERY_TIMEOUT_SECS
        )
        rows = (data or {}).get("data")
        if not isinstance(rows, list):
            return []
        return rows

    async def list_queries(self, app_id: str) -> List[QueryMeta]:
        data = await self._request("GET", f"/apps/{app_id}/queries")
        return [QueryMeta.model_validate(item) for item in (data or [])]
