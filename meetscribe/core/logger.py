import json
from pathlib import Path
from datetime import datetime
from typing import Any, Optional

from ..constants import API_LOG_FILENAME


class APILogger:
    """
    Logs raw API requests and responses to a file.
    """
    def __init__(self, log_dir: Path):
        self.log_dir = Path(log_dir)
        self.log_file = self.log_dir / API_LOG_FILENAME
        self._ensure_log_file()

    def _ensure_log_file(self):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        if not self.log_file.exists():
            with open(self.log_file, "w") as f:
                f.write(f"# API Call Log for {self.log_dir.name}\n")
                f.write(f"# Created at: {datetime.now().isoformat()}\n\n")

    def log(self, provider: str, endpoint: str, request: Any, response: Any, error: Optional[str] = None):
        """
        Log an API interaction in human-readable text format.
        """
        timestamp = datetime.now().isoformat()

        with open(self.log_file, "a") as f:
            f.write("=" * 80 + "\n")
            f.write(f"[{timestamp}] {provider.upper()} - {endpoint}\n")
            f.write("=" * 80 + "\n\n")

            f.write("REQUEST:\n")
            f.write("-" * 80 + "\n")
            f.write(self._format_data(self._sanitize(request)))
            f.write("\n\n")

            f.write("RESPONSE:\n")
            f.write("-" * 80 + "\n")
            if error:
                f.write(f"ERROR: {error}\n")
            else:
                f.write(self._format_data(self._sanitize(response)))
            f.write("\n\n\n")

    def _format_data(self, data: Any, indent: int = 0) -> str:
        """
        Format data in a human-readable way with indentation.
        """
        prefix = "  " * indent

        if data is None:
            return f"{prefix}None"

        if isinstance(data, (bool, int, float, str)):
            return f"{prefix}{data}"

        if isinstance(data, dict):
            if not data:
                return f"{prefix}{{}}"

            lines = []
            for key, value in data.items():
                if isinstance(value, (dict, list)):
                    lines.append(f"{prefix}{key}:")
                    lines.append(self._format_data(value, indent + 1))
                else:
                    lines.append(f"{prefix}{key}: {self._format_data(value).strip()}")
            return "\n".join(lines)

        if isinstance(data, (list, tuple)):
            if not data:
                return f"{prefix}[]"

            lines = []
            for i, item in enumerate(data):
                if isinstance(item, (dict, list)):
                    lines.append(f"{prefix}[{i}]:")
                    lines.append(self._format_data(item, indent + 1))
                else:
                    lines.append(f"{prefix}[{i}]: {self._format_data(item).strip()}")
            return "\n".join(lines)

        return f"{prefix}{str(data)}"

    def _sanitize(self, data: Any) -> Any:
        """
        Make data loggable: binary payloads are replaced by their size, schemas are dumped compactly.
        """
        if isinstance(data, (bytes, bytearray)):
            return f"<{len(data)} bytes>"
        if isinstance(data, (str, int, float, bool, type(None))):
            return data
        if isinstance(data, (list, tuple)):
            return [self._sanitize(item) for item in data]
        if isinstance(data, dict):
            if "type" in data and ("properties" in data or "items" in data):
                return json.dumps(data, ensure_ascii=False)
            return {k: self._sanitize(v) for k, v in data.items()}
        return str(data)
