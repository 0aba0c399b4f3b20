"""Jurisdiction compliance advisories.

Codes are matched case- and whitespace-insensitively against a read-only
table holding both two-letter codes and full names. Unknown codes get the
generic notice; resolution never fails.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)

DEFAULT_ADVISORY = "Aquamark compliance notice: Broker disclosure applies."

_CALIFORNIA = "California compliance: Broker disclosures required."
_NEW_YORK = "New York law requires funder-broker transparency."
_TEXAS = "Texas compliance: No misrepresentation permitted."

DEFAULT_DISCLAIMERS: Mapping[str, str] = MappingProxyType({
    "ca": _CALIFORNIA,
    "california": _CALIFORNIA,
    "ny": _NEW_YORK,
    "newyork": _NEW_YORK,
    "tx": _TEXAS,
    "texas": _TEXAS,
})

# Key accepted in a JSON table file for the fallback advisory
_DEFAULT_KEY = "default"


def normalize_code(code: object) -> str:
    """Lower-case a jurisdiction code and drop all whitespace."""
    return "".join(str(code).split()).lower()


class DisclaimerResolver:
    """Maps jurisdiction codes to advisory text.

    The table is normalized once on construction and exposed read-only, so a
    single instance can be shared across concurrent requests.
    """

    def __init__(
        self,
        table: Mapping[str, str] | None = None,
        default: str = DEFAULT_ADVISORY,
    ) -> None:
        source = DEFAULT_DISCLAIMERS if table is None else table
        self._table = MappingProxyType({normalize_code(k): v for k, v in source.items()})
        self.default = default

    @property
    def table(self) -> Mapping[str, str]:
        return self._table

    def resolve(self, code: str | None) -> str:
        """Advisory for ``code``, or the default when it has no entry."""
        if code is None:
            return self.default
        return self._table.get(normalize_code(code), self.default)

    def advisory_for(self, code: str | None) -> str | None:
        """Like resolve(), but None when no code was supplied at all."""
        if code is None or not str(code).strip():
            return None
        return self.resolve(code)

    @classmethod
    def from_json(cls, path: str | Path) -> "DisclaimerResolver":
        """Load a table from a JSON object of ``code -> advisory``.

        An optional ``"default"`` key (any case) replaces the fallback text.

        Raises:
            ValueError: If the file is not a JSON object of strings.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Cannot read disclaimer table {path}: {e}") from e

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise ValueError(f"Disclaimer table {path} must map strings to strings")

        default = DEFAULT_ADVISORY
        table: dict[str, str] = {}
        for key, text in data.items():
            if normalize_code(key) == _DEFAULT_KEY:
                default = text
            else:
                table[key] = text

        logger.info("Loaded %d disclaimer entries from %s", len(table), path)
        return cls(table, default=default)


_default_resolver = DisclaimerResolver()


def resolve(code: str | None) -> str:
    """Resolve against the built-in table."""
    return _default_resolver.resolve(code)
