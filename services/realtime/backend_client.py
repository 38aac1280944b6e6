"""HTTP client for the relay's realtime session endpoint."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from services.realtime.voice_session import SessionConnectError


class BackendClient:
	"""Request realtime session credentials from the relay backend."""

	def __init__(self, base_url: str, http_client: Optional[httpx.AsyncClient] = None) -> None:
		self.base_url = base_url.rstrip("/")
		self._http = http_client

	async def create_session(self, preferred_lang: Optional[str] = None) -> Dict[str, Any]:
		"""POST /session and return the provider session object.

		Raises:
			SessionConnectError: The relay was unreachable or answered with an error.
		"""
		body = {"preferredLang": preferred_lang} if preferred_lang else {}
		try:
			if self._http is not None:
				response = await self._http.post(f"{self.base_url}/session", json=body)
			else:
				async with httpx.AsyncClient() as client:
					response = await client.post(f"{self.base_url}/session", json=body)
		except httpx.HTTPError as exc:
			raise SessionConnectError(f"Session fetch failed: {exc}") from exc

		try:
			data = response.json()
		except ValueError:
			data = {"raw": response.text}
		if response.is_error:
			detail = data.get("error") if isinstance(data, dict) else None
			raise SessionConnectError(detail or f"Session request failed with status {response.status_code}")
		return data
