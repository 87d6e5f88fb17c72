"""Platform settings — key/value configuration persisted per key.

Reads always merge persisted values over the built-in defaults, so a fresh
database behaves exactly like one holding every default.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from tianguis.domain import tianguis

logger = structlog.get_logger(__name__)


class SettingCategory(Enum):
    GENERAL = "general"
    PAYMENT = "payment"
    EMAIL = "email"
    SHIPPING = "shipping"
    LOCALIZATION = "localization"


@dataclass(frozen=True)
class SettingDefinition:
    default: object
    category: str
    kind: type


_G, _P, _E, _S, _L = (c.value for c in SettingCategory)

DEFINITIONS: dict[str, SettingDefinition] = {
    "site_name": SettingDefinition("Tianguis", _G, str),
    "admin_email": SettingDefinition("", _G, str),
    "maintenance_mode": SettingDefinition(False, _G, bool),
    "platform_commission": SettingDefinition(15.0, _P, float),
    "test_mode": SettingDefinition(True, _P, bool),
    "tax_rate": SettingDefinition(16.0, _P, float),
    "currency": SettingDefinition("MXN", _P, str),
    "from_email": SettingDefinition("", _E, str),
    "from_name": SettingDefinition("", _E, str),
    "order_notifications": SettingDefinition(True, _E, bool),
    "default_shipping_cost": SettingDefinition(99.0, _S, float),
    "free_shipping_threshold": SettingDefinition(1000.0, _S, float),
    "default_locale": SettingDefinition("es", _L, str),
    "timezone": SettingDefinition("America/Mexico_City", _L, str),
}

_PERCENT_KEYS = ("platform_commission", "tax_rate")


@tianguis.aggregate
class PlatformSetting:
    key: String(identifier=True, required=True, max_length=100)
    value: Text(required=True)  # JSON-encoded
    category: String(required=True, choices=SettingCategory)
    updated_by: Identifier()
    updated_at: DateTime(default=datetime.now)

    @property
    def decoded(self):
        return json.loads(self.value)

    def change(self, value, updated_by):
        previous = self.decoded
        self.value = json.dumps(value)
        self.updated_by = updated_by
        self.updated_at = datetime.now()
        self.raise_(
            SettingChanged(
                key=self.key,
                category=self.category,
                previous_value=json.dumps(previous),
                new_value=self.value,
                updated_by=updated_by,
            )
        )


@tianguis.event(part_of=PlatformSetting)
class SettingChanged:
    __version__ = 1

    key: String(required=True)
    category: String(required=True)
    previous_value: Text()
    new_value: Text(required=True)
    updated_by: Identifier()


def _coerce(key: str, value):
    definition = DEFINITIONS[key]
    if definition.kind is bool:
        if not isinstance(value, bool):
            raise ValidationError({key: ["Must be true or false"]})
        return value
    if definition.kind is float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValidationError({key: ["Must be a number"]})
        if value < 0:
            raise ValidationError({key: ["Must not be negative"]})
        if key in _PERCENT_KEYS and value > 100:
            raise ValidationError({key: ["Must be a percentage between 0 and 100"]})
        return float(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError({key: ["Must be a non-empty string"]})
    return value.strip()


def get_settings() -> dict:
    settings = {key: definition.default for key, definition in DEFINITIONS.items()}
    for record in current_domain.repository_for(PlatformSetting)._dao.query.all().items:
        if record.key in DEFINITIONS:
            settings[record.key] = record.decoded
    return settings


def settings_by_category() -> dict[str, dict]:
    grouped: dict[str, dict] = {c.value: {} for c in SettingCategory}
    for key, value in get_settings().items():
        grouped[DEFINITIONS[key].category][key] = value
    return grouped


@tianguis.command(part_of=PlatformSetting)
class UpdateSettings:
    values = Text(required=True)  # JSON object of key -> value
    updated_by = Identifier(required=True)


@tianguis.command_handler(part_of=PlatformSetting)
class UpdateSettingsHandler:
    @handle(UpdateSettings)
    def update_settings(self, command):
        values = json.loads(command.values) if isinstance(command.values, str) else command.values
        if not isinstance(values, dict) or not values:
            raise ValidationError({"values": ["Provide at least one setting to update"]})

        unknown = sorted(set(values) - set(DEFINITIONS))
        if unknown:
            raise ValidationError({"values": [f"Unknown setting(s): {', '.join(unknown)}"]})

        coerced = {key: _coerce(key, value) for key, value in values.items()}

        repo = current_domain.repository_for(PlatformSetting)
        changed = []
        for key, value in coerced.items():
            try:
                record = repo.get(key)
            except ObjectNotFoundError:
                record = PlatformSetting(
                    key=key,
                    value=json.dumps(DEFINITIONS[key].default),
                    category=DEFINITIONS[key].category,
                )
            if record.decoded == value:
                continue
            record.change(value, updated_by=command.updated_by)
            repo.add(record)
            changed.append(key)

        logger.info("settings.updated", keys=changed, updated_by=str(command.updated_by))
        return changed
