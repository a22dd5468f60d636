from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from rpsduel.engine.match import PVP_CONFIG, MatchConfig
from rpsduel.engine.types import COMPOSITION_KEYS, DeckComposition, MatchMode

log = logging.getLogger(__name__)


class SettingsError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise SettingsError(f"Missing settings file: {path}") from e
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: e.path)
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise SettingsError("\n".join(lines))


@dataclass(frozen=True)
class GameSettings:
    hand_size: int
    composition: DeckComposition
    open_hand: bool = False

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "GameSettings":
        raw_size = d.get("handSize", 1)
        hand_size = max(1, raw_size) if isinstance(raw_size, int) else 1
        deck_raw = d.get("deck", {})
        composition = DeckComposition.from_dict(deck_raw if isinstance(deck_raw, dict) else {})
        return GameSettings(
            hand_size=hand_size,
            composition=composition,
            open_hand=bool(d.get("openHand", False)),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "handSize": self.hand_size,
            "deck": self.composition.to_dict(),
            "openHand": self.open_hand,
        }

    def to_match_config(self, mode: MatchMode = "bot") -> MatchConfig:
        if mode == "pvp":
            return PVP_CONFIG
        return MatchConfig(
            composition=self.composition,
            hand_size=self.hand_size,
            open_hand=self.open_hand,
            mode="bot",
        )


def validate(settings: GameSettings) -> None:
    total = settings.composition.total()
    if total == 0:
        raise SettingsError("Deck cannot be empty.")
    if settings.hand_size > total:
        raise SettingsError(
            f"Hand size ({settings.hand_size}) cannot exceed total deck size ({total})."
        )


def apply_overrides(settings: GameSettings, params: Mapping[str, str]) -> GameSettings:
    """Apply query-parameter style string overrides on top of stored settings.

    Unparseable numbers count as 0, matching how the web client read its URL.
    """

    def as_int(raw: str) -> int:
        try:
            return int(raw)
        except ValueError:
            return 0

    out = settings
    if "handSize" in params:
        out = replace(out, hand_size=max(1, as_int(params["handSize"])))
    if "openHand" in params:
        out = replace(out, open_hand=params["openHand"] == "true")

    deck = out.composition.to_dict()
    touched = False
    for key, _kind in COMPOSITION_KEYS:
        if key in params:
            deck[key] = max(0, as_int(params[key]))
            touched = True
    if touched:
        out = replace(out, composition=DeckComposition.from_dict(deck))
    return out


class SettingsService:
    def __init__(self, settings_path: Path, data_dir: Path, schema_dir: Path) -> None:
        self._path = settings_path
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _schema(self) -> object:
        return _load_json(self._schema_dir / "settings.schema.json")

    def _parse(self, path: Path) -> GameSettings:
        raw = _load_json(path)
        validate_json(raw, self._schema(), context=str(path))
        if not isinstance(raw, dict):
            raise SettingsError(f"{path} must be an object")
        return GameSettings.from_dict(raw)

    def defaults(self) -> GameSettings:
        return self._parse(self._data_dir / "default_settings.json")

    def load(self) -> GameSettings:
        if not self._path.exists():
            log.info("No saved settings at %s, using defaults", self._path)
            return self.defaults()
        settings = self._parse(self._path)
        log.debug("Loaded settings from %s: %s", self._path, settings)
        return settings

    def save(self, settings: GameSettings) -> None:
        validate(settings)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
        log.info("Saved settings to %s", self._path)

    def reset(self) -> GameSettings:
        settings = self.defaults()
        self.save(settings)
        return settings
