"""Evidence repository."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from epq.data.errors import DataValidationError
from epq.data.repositories.base import RepositoryBase
from epq.domain.defs import EvidenceDef


class EvidenceRepository(RepositoryBase[EvidenceDef]):
    def __init__(self, base_path: Path | str | None = None) -> None:
        super().__init__("evidence.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, EvidenceDef]:
        evidence: Dict[str, EvidenceDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Evidence IDs must be strings.")
            data = self._require_mapping(payload, f"evidence '{raw_id}'")
            evidence[raw_id] = EvidenceDef(
                id=raw_id,
                name=self._require_str(data.get("name"), f"evidence '{raw_id}' name"),
                description=self._require_str(data.get("description"), f"evidence '{raw_id}' description"),
            )
        return evidence

    def search(self, term: str) -> List[EvidenceDef]:
        """Case-insensitive match against name and description."""
        needle = term.lower()
        return [
            entry
            for entry in self.all()
            if needle in entry.name.lower() or needle in entry.description.lower()
        ]
