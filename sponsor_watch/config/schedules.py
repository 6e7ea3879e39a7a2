"""Loading schedule definitions from a JSON file."""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from sponsor_watch.core.exceptions import ConfigurationError


def load_schedule_definitions(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read schedule definitions from a JSON file.

    The file holds either a list of schedule objects or an object with a
    ``schedules`` list. Each object uses the same fields as
    ``ScheduleStore.create``; validation happens there.

    Raises:
        ConfigurationError: If the file is missing or not shaped as expected
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"Schedule file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Schedule file is not valid JSON: {path}", details={"error": str(e)})

    if isinstance(data, dict):
        data = data.get("schedules")
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ConfigurationError(f"Schedule file must contain a list of schedule objects: {path}")
    return data
