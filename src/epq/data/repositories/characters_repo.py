"""Repository for non-player characters."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from epq.data.errors import DataValidationError
from epq.data.repositories.base import RepositoryBase
from epq.domain.defs import CHARACTER_CATEGORIES, CharacterDef
from epq.domain.relationships import RELATIONSHIP_MAX, RELATIONSHIP_MIN


class CharactersRepository(RepositoryBase[CharacterDef]):
    """Loads character definitions along with their relationship unlocks."""

    def __init__(self, base_path: Path | str | None = None) -> None:
        super().__init__("characters.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, CharacterDef]:
        characters: Dict[str, CharacterDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Character IDs must be strings.")
            context = f"character '{raw_id}'"
            data = self._require_mapping(payload, context)
            category = self._require_str(data.get("category"), f"{context} category")
            if category not in CHARACTER_CATEGORIES:
                raise DataValidationError(f"{context} category '{category}' is not one of {list(CHARACTER_CATEGORIES)}.")
            initial = self._require_int(data.get("initialRelationship", 0), f"{context} initialRelationship")
            if not RELATIONSHIP_MIN <= initial <= RELATIONSHIP_MAX:
                raise DataValidationError(f"{context} initialRelationship must be within [-100, 100].")
            characters[raw_id] = CharacterDef(
                id=raw_id,
                name=self._require_str(data.get("name"), f"{context} name"),
                role=self._require_str(data.get("role"), f"{context} role"),
                description=self._require_str(data.get("description"), f"{context} description"),
                category=category,
                location=self._require_str(data.get("location", ""), f"{context} location"),
                initial_relationship=initial,
                relationship_thresholds=self._parse_thresholds(data.get("relationshipThresholds"), context),
                unlocks=self._parse_unlocks(data.get("unlocks"), context),
            )
        return characters

    def _parse_thresholds(self, raw: object, context: str) -> Dict[str, int]:
        if raw is None:
            return {}
        data = self._require_mapping(raw, f"{context} relationshipThresholds")
        return {
            name: self._require_int(value, f"{context} relationshipThresholds '{name}'")
            for name, value in data.items()
        }

    def _parse_unlocks(self, raw: object, context: str) -> Dict[int, str]:
        if raw is None:
            return {}
        data = self._require_mapping(raw, f"{context} unlocks")
        unlocks: Dict[int, str] = {}
        for threshold, description in data.items():
            try:
                score = int(threshold)
            except ValueError as exc:
                raise DataValidationError(f"{context} unlock key '{threshold}' must be an integer.") from exc
            unlocks[score] = self._require_str(description, f"{context} unlocks '{threshold}'")
        return unlocks

    def initial_relationships(self) -> Dict[str, int]:
        return {character.id: character.initial_relationship for character in self.all()}

    def by_category(self, category: str) -> List[CharacterDef]:
        return [character for character in self.all() if character.category == category]

    def unlocked_content(self, character_id: str, score: int) -> List[str]:
        """Descriptions of every unlock whose threshold ``score`` has reached."""
        if not self.exists(character_id):
            return []
        unlocks = self.get(character_id).unlocks
        return [unlocks[threshold] for threshold in sorted(unlocks) if score >= threshold]

    def next_unlock(self, character_id: str, score: int) -> Tuple[int, str] | None:
        """The lowest threshold above ``score``, or None once everything is unlocked."""
        if not self.exists(character_id):
            return None
        unlocks = self.get(character_id).unlocks
        for threshold in sorted(unlocks):
            if score < threshold:
                return threshold, unlocks[threshold]
        return None

    def has_reached_threshold(self, character_id: str, threshold_name: str, score: int) -> bool:
        if not self.exists(character_id):
            return False
        threshold = self.get(character_id).relationship_thresholds.get(threshold_name)
        return threshold is not None and score >= threshold
