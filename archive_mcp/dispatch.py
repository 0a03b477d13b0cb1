# archive_mcp/dispatch.py

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from archive_mcp.config import ClientState
from archive_mcp.errors import MISSING_KEY_MESSAGE, ArchiveAPIError, translate_error
from archive_mcp.registry import ToolDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultEnvelope:
    """The single value every tool invocation produces."""
    text: str
    is_error: bool = False


def _log_result(tool: str, ok: bool, error_code: Optional[Any] = None, error_message: str = "") -> None:
    prefix = f"tool={tool} ok={ok}"
    if ok:
        logger.info(prefix)
        return
    logger.warning("%s error_code=%s error_message=%s", prefix, error_code or "UNKNOWN_ERROR", error_message)


class Dispatcher:
    """
    Runs tool calls against the upstream client.

    Every call ends in one envelope: the formatted result, or a translated
    error. Without a configured client every call returns the setup
    instructions and nothing is sent upstream.
    """

    def __init__(self, state: ClientState):
        self._state = state

    @property
    def is_configured(self) -> bool:
        return self._state.is_configured

    async def dispatch(self, tool: ToolDescriptor, arguments: Optional[Dict[str, Any]] = None) -> ResultEnvelope:
        if not self._state.is_configured:
            _log_result(tool.name, ok=False, error_code="MISSING_API_KEY")
            return ResultEnvelope(MISSING_KEY_MESSAGE, is_error=True)

        try:
            text = await tool.call.execute(self._state.client, **(arguments or {}))
        except ArchiveAPIError as e:
            _log_result(tool.name, ok=False, error_code=e.code, error_message=e.message)
            return ResultEnvelope(translate_error(e), is_error=True)
        except Exception as e:
            logger.debug("Unexpected error in %s", tool.name, exc_info=True)
            _log_result(tool.name, ok=False, error_code=type(e).__name__, error_message=str(e))
            return ResultEnvelope(translate_error(e), is_error=True)

        _log_result(tool.name, ok=True)
        return ResultEnvelope(text)
