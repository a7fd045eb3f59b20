"""
YAML run log recording each pipeline step.
"""
import yaml
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

RUN_LOG_NAME = "periphery_run_log.yaml"


class RunLog:
    """Append-only event log for a periphery run, stored beside its artifacts."""

    def __init__(self, log_path: Path):
        self.log_path = log_path

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.log_path, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            data = None
        except yaml.YAMLError:
            # Corrupt log - start over
            data = None

        if data is None or not isinstance(data, dict):
            data = {'version': 1, 'entries': []}

        if 'entries' not in data or not isinstance(data['entries'], list):
            data['entries'] = []

        return data

    def log_event(self, event_type: str, details: Dict[str, Any] = None):
        """Append an event, recreating the log if missing or corrupt."""
        data = self._load()

        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'event_type': event_type,
        }
        if details:
            entry.update(details)

        data['entries'].append(entry)

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, 'w') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def entries(self) -> List[Dict[str, Any]]:
        return self._load()['entries']
