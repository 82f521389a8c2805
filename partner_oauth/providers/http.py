from typing import Any, Optional

import httpx

from partner_oauth.core.exceptions import UpstreamAPIError


async def get_json_with_bearer(
    url: str,
    access_token: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """GET a JSON resource with a bearer token and return the decoded body.

    Any failure is raised as ``UpstreamAPIError`` with a readable message.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.get(
                url, headers={"Authorization": f"Bearer {access_token}"}
            )
    except httpx.HTTPError as e:
        raise UpstreamAPIError(f"API request failed: {e}") from e

    if not response.is_success:
        raise UpstreamAPIError(
            f"API call failed: {response.status_code} {response.reason_phrase}"
        )

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamAPIError(f"API returned invalid JSON: {e}") from e
