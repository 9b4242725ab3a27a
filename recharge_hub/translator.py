from typing import Mapping

from recharge_hub.logging_config import get_logger

logger = get_logger(__name__)


class CodeTranslator:
    """
    Static lookup of caller-space operator and circle codes into a provider's own vocabulary.

    Unmapped codes are passed through unchanged; some providers accept the
    caller-space codes directly.
    """

    def __init__(
        self,
        operator_tables: Mapping[str, Mapping[str, str]],
        circle_tables: Mapping[str, Mapping[str, str]],
    ):
        self._operator_tables = {provider: dict(table) for provider, table in operator_tables.items()}
        self._circle_tables = {provider: dict(table) for provider, table in circle_tables.items()}

    @staticmethod
    def _lookup(tables: Mapping[str, Mapping[str, str]], code: str, provider_id: str, kind: str) -> str:
        table = tables.get(provider_id, {})
        translated = table.get(code)
        if translated is None:
            logger.debug("No %s mapping for code=%s provider=%s, passing through", kind, code, provider_id)
            return code
        return translated

    def translate_operator(self, code: str, provider_id: str) -> str:
        return self._lookup(self._operator_tables, code, provider_id, "operator")

    def translate_circle(self, code: str, provider_id: str) -> str:
        return self._lookup(self._circle_tables, code, provider_id, "circle")
