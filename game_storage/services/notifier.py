import logging

import httpx

from game_storage.models.dc_models import StartGameModel

CREATE_PATH = "/v1a/create"


class MatchNotifier:
    """Announces started games to the match-execution service.

    One instance (and one underlying httpx.AsyncClient) is shared by every
    request; close() it on shutdown.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        retries: int = 1,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if transport is None:
            # Only failed connection attempts are retried; a request that was
            # sent is never re-sent here.
            transport = httpx.AsyncHTTPTransport(retries=retries)
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def announce_start(self, start_game: StartGameModel) -> bool:
        """Tell the match-execution service that a game is starting

        The game code is sent as the idempotency key, so announcing the same
        game twice is seen by the service as a single start.

        Args:
            start_game (StartGameModel): Game code, teams and schedule

        Returns:
            bool: True if the service accepted the game (2xx)
        """
        try:
            response = await self.client.post(
                CREATE_PATH,
                content=start_game.model_dump_json(),
                headers={
                    "Content-Type": "application/json",
                    "Idempotency-Key": start_game.code,
                },
            )
        except httpx.TimeoutException as e:
            logging.error(f"Match service timed out announcing game {start_game.code}: {e!r}")
            return False
        except httpx.HTTPError as e:
            logging.error(f"Match service unreachable announcing game {start_game.code}: {e!r}")
            return False

        if not response.is_success:
            logging.error(
                f"Match service rejected game {start_game.code}: "
                f"{response.status_code} {response.text}"
            )
            return False
        return True

    async def close(self) -> None:
        await self.client.aclose()
