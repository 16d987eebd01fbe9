"""JSON output formatter for license-curator."""
import json
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from license_curator import __version__
from license_curator.constants import LEGAL_DISCLAIMER_SHORT


class JsonFormatter:
    """Format any result model as JSON with a metadata header."""

    def format(self, kind: str, payload: BaseModel) -> str:
        """Format a model as a JSON document.

        Args:
            kind: Name of the payload section, e.g. "report".
            payload: The model to serialize.

        Returns:
            JSON string with ``metadata`` and the payload under ``kind``.
        """
        output: dict[str, Any] = {
            "metadata": self._build_metadata(),
            kind: payload.model_dump(mode="json"),
        }
        return json.dumps(output, indent=2)

    def _build_metadata(self) -> dict[str, Any]:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        return {
            "generated_at": timestamp,
            "tool_version": __version__,
            "disclaimer": LEGAL_DISCLAIMER_SHORT,
        }
