import json
import logging
import os
from typing import Any, Dict

from pydantic import ValidationError

from cupbracket.core.config import settings
from cupbracket.models.tournament_model import TournamentState

logger = logging.getLogger(__name__)


class TournamentStore:
    """
    Key-value JSON file holding the serialized tournament state.

    The file maps storage keys to documents, so the state lives under a single
    fixed key (``settings.STORAGE_KEY``) next to anything else stored there.
    """

    def __init__(self, data_file_path: str = settings.STATE_FILE, storage_key: str = settings.STORAGE_KEY):
        self.data_file_path = data_file_path
        self.storage_key = storage_key
        directory = os.path.dirname(self.data_file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def _load_entries(self) -> Dict[str, Any]:
        if not os.path.exists(self.data_file_path):
            return {}
        try:
            with open(self.data_file_path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            logger.warning("Could not read %s: %s", self.data_file_path, e)
            return {}
        if not content.strip():
            return {}
        try:
            entries = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning("Could not decode JSON from %s: %s", self.data_file_path, e)
            return {}
        if not isinstance(entries, dict):
            logger.warning("Ignoring %s: expected a JSON object, got %s", self.data_file_path, type(entries).__name__)
            return {}
        return entries

    def _save_entries(self, entries: Dict[str, Any]):
        with open(self.data_file_path, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=4, ensure_ascii=False)

    def load(self) -> TournamentState:
        """Returns the stored state, or a fresh default state if none can be read."""
        document = self._load_entries().get(self.storage_key)
        if document is None:
            return TournamentState()
        try:
            return TournamentState.model_validate(document)
        except ValidationError as e:
            logger.warning(
                "Stored tournament under '%s' is invalid, starting from defaults: %s",
                self.storage_key, e.errors()[:3],
            )
            return TournamentState()

    def save(self, state: TournamentState):
        entries = self._load_entries()
        entries[self.storage_key] = state.to_document()
        self._save_entries(entries)

    def clear(self):
        entries = self._load_entries()
        if entries.pop(self.storage_key, None) is not None:
            self._save_entries(entries)
