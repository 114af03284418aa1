"""Lift-Log HTTP client."""

import logging
import os

import httpx

from liftlog.exceptions import TransportError
from liftlog.models import Workout

logger = logging.getLogger(__name__)

API_URL = os.getenv("LIFTLOG_API_URL", "http://localhost:8000")
API_TIMEOUT = float(os.getenv("LIFTLOG_API_TIMEOUT", "10"))
WORKOUTS_PATH = "/api/workouts"


def _decode(response: httpx.Response, parse):
    try:
        return parse(response.json())
    except ValueError as e:
        raise TransportError(
            f"Malformed response from API: {e}", status_code=response.status_code
        ) from e


class WorkoutApiClient:
    """Client for the workouts API.

    Every failure (connection error, timeout, non-2xx answer other than a 404 on
    lookup) is raised as ``TransportError``.
    """

    def __init__(
        self,
        base_url: str = API_URL,
        timeout: float = API_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException as e:
                raise TransportError(f"{method} {path} timed out") from e
            except httpx.HTTPError as e:
                raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400 and response.status_code != 404:
            raise TransportError(
                f"API request failed: {response.text}",
                status_code=response.status_code,
            )
        return response

    async def list_workouts(self) -> list[Workout]:
        """Fetch all workouts, newest first."""
        response = await self._request("GET", WORKOUTS_PATH)
        self._raise_for_missing(response)
        return _decode(response, lambda data: [Workout.model_validate(w) for w in data])

    async def get_workout(self, workout_id: str) -> Workout | None:
        response = await self._request("GET", f"{WORKOUTS_PATH}/{workout_id}")
        if response.status_code == 404:
            return None
        return _decode(response, Workout.model_validate)

    async def create_workout(self, workout: Workout) -> Workout:
        """Submit a finished workout and return it with the server-assigned ids and date."""
        payload = workout.to_wire()
        payload.pop("id", None)
        response = await self._request("POST", WORKOUTS_PATH, json=payload)
        self._raise_for_missing(response)
        created = _decode(response, Workout.model_validate)
        logger.info(f"Created workout {created.id} ({len(created.exercises)} exercises)")
        return created

    @staticmethod
    def _raise_for_missing(response: httpx.Response) -> None:
        if response.status_code == 404:
            raise TransportError("API endpoint not found", status_code=404)
