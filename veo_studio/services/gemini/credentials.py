"""API key gate backed by the process environment."""

from dotenv import load_dotenv

from veo_studio.config import get_api_key
from veo_studio.core import get_logger
from veo_studio.services.generation.ports import CredentialProvider

logger = get_logger(__name__, component="credentials")


class EnvironmentCredentials(CredentialProvider):
    """GEMINI_API_KEY from the environment; selecting a key re-reads .env."""

    def __init__(self, dotenv_path: str | None = None):
        self.dotenv_path = dotenv_path

    async def has_selected_api_key(self) -> bool:
        return get_api_key() is not None

    async def open_select_key(self) -> None:
        loaded = load_dotenv(self.dotenv_path, override=True)
        logger.info(
            "Reloaded API key from environment file",
            extra={"env_file_found": loaded, "key_present": get_api_key() is not None},
        )
