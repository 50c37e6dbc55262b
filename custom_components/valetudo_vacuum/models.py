from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from .const import (
    CONF_DEFAULT_SPEED,
    CONF_HIGH_SPEED,
    CONF_HOST,
    CONF_MOP_ENABLED,
    CONF_NAME,
    CONF_POWER_CONTROL,
    CONF_SPOTS,
    DEFAULT_HIGH_SPEED_PRESET,
    DEFAULT_NAME,
    DEFAULT_SPEED_PRESET,
    LOW_BATTERY_THRESHOLD,
)
from .errors import ValetudoConfigurationError, ValetudoParseError


class VacuumState(IntEnum):
    UNKNOWN = 0
    STARTING = 1
    CHARGER_DISCONNECTED = 2
    IDLE = 3
    REMOTE_ACTIVE = 4
    CLEANING = 5
    RETURNING_HOME = 6
    MANUAL_MODE = 7
    CHARGING = 8
    CHARGING_PROBLEM = 9
    PAUSED = 10
    SPOT_CLEANING = 11
    ERROR = 12
    SHUTTING_DOWN = 13
    UPDATING = 14
    DOCKING = 15
    GOING_TO_TARGET = 16
    ZONE_CLEANING = 17

    @classmethod
    def _missing_(cls, value: object) -> VacuumState:
        return cls.UNKNOWN


# The robot is parked and nothing is expected to change soon.
QUIESCENT_STATES = frozenset({VacuumState.IDLE, VacuumState.CHARGING})

# States in which there is no cleaning run to stop.
NOT_STOPPABLE_STATES = frozenset(
    {
        VacuumState.IDLE,
        VacuumState.RETURNING_HOME,
        VacuumState.CHARGING,
        VacuumState.PAUSED,
        VacuumState.SPOT_CLEANING,
        VacuumState.DOCKING,
        VacuumState.GOING_TO_TARGET,
    }
)


class FanSpeed(IntEnum):
    QUIET = 101
    BALANCED = 102
    TURBO = 103
    MAX = 104
    MOP = 105

    @property
    def preset(self) -> str:
        return self.name.lower()

    @classmethod
    def from_preset(cls, preset: str) -> FanSpeed:
        try:
            return cls[preset.strip().upper()]
        except (KeyError, AttributeError):
            raise ValetudoConfigurationError(f"Invalid power preset given: {preset!r}") from None

    @classmethod
    def presets(cls) -> list[str]:
        return [speed.preset for speed in cls]


class ChargingState(Enum):
    NOT_CHARGING = "not_charging"
    CHARGING = "charging"
    NOT_CHARGEABLE = "not_chargeable"


@dataclass(frozen=True)
class VacuumStatus:
    """Snapshot of /api/current_status."""

    state: VacuumState
    battery: int
    fan_power: int | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> VacuumStatus:
        if not isinstance(payload, dict):
            raise ValetudoParseError(f"Unexpected /api/current_status response shape: {type(payload).__name__}")

        state = payload.get("state")
        battery = payload.get("battery")
        # bool is an int subclass; the firmware never sends one for these.
        if not isinstance(state, int) or isinstance(state, bool):
            raise ValetudoParseError(f"Missing or invalid state in status: {state!r}")
        if not isinstance(battery, int) or isinstance(battery, bool):
            raise ValetudoParseError(f"Missing or invalid battery in status: {battery!r}")

        fan_power = payload.get("fan_power")
        if not isinstance(fan_power, int) or isinstance(fan_power, bool):
            fan_power = None

        extra = {k: v for k, v in payload.items() if k not in ("state", "battery", "fan_power")}
        if VacuumState(state) is VacuumState.UNKNOWN:
            extra["raw_state"] = state

        return cls(
            state=VacuumState(state),
            battery=max(0, min(100, battery)),
            fan_power=fan_power,
            extra=extra,
        )

    @property
    def is_quiescent(self) -> bool:
        return self.state in QUIESCENT_STATES

    @property
    def is_cleaning(self) -> bool:
        return self.state is VacuumState.CLEANING

    @property
    def is_returning_home(self) -> bool:
        return self.state is VacuumState.RETURNING_HOME

    @property
    def is_spot_cleaning(self) -> bool:
        return self.state is VacuumState.SPOT_CLEANING

    @property
    def is_stoppable(self) -> bool:
        return self.state not in NOT_STOPPABLE_STATES

    @property
    def battery_low(self) -> bool:
        return self.battery < LOW_BATTERY_THRESHOLD

    @property
    def charging_state(self) -> ChargingState:
        if self.state is VacuumState.CHARGING:
            return ChargingState.CHARGING
        if self.state in (VacuumState.CHARGER_DISCONNECTED, VacuumState.CHARGING_PROBLEM):
            return ChargingState.NOT_CHARGEABLE
        return ChargingState.NOT_CHARGING

    @property
    def fan_speed(self) -> FanSpeed | None:
        if self.fan_power is None:
            return None
        try:
            return FanSpeed(self.fan_power)
        except ValueError:
            # Custom fan power percentages set from the Valetudo UI.
            return None


@dataclass(frozen=True)
class PowerControl:
    default_speed: FanSpeed = FanSpeed.QUIET
    high_speed: FanSpeed = FanSpeed.TURBO
    mop: bool = False

    @classmethod
    def from_presets(
        cls,
        default_speed: str | None = None,
        high_speed: str | None = None,
        mop: bool = False,
    ) -> PowerControl:
        return cls(
            default_speed=FanSpeed.from_preset(default_speed or DEFAULT_SPEED_PRESET),
            high_speed=FanSpeed.from_preset(high_speed or DEFAULT_HIGH_SPEED_PRESET),
            mop=bool(mop),
        )

    def is_high_speed(self, status: VacuumStatus) -> bool:
        return status.fan_power == self.high_speed

    def is_mopping(self, status: VacuumStatus) -> bool:
        return status.fan_power == FanSpeed.MOP


@dataclass(frozen=True)
class Spot:
    name: str
    x: int
    y: int

    @property
    def key(self) -> str:
        return "".join(c if c.isalnum() else "_" for c in self.name.lower()).strip("_") or "spot"


def parse_spots(raw: str | None) -> tuple[Spot, ...]:
    """Parse ``name: x, y`` lines into spots."""
    spots: list[Spot] = []
    seen: dict[str, str] = {}
    for lineno, line in enumerate((raw or "").splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        name, sep, coords = line.rpartition(":")
        name = name.strip()
        parts = [p.strip() for p in coords.split(",")]
        if not sep or not name or len(parts) != 2:
            raise ValetudoConfigurationError(f"Invalid spot on line {lineno}: {line!r} (expected 'name: x, y')")
        try:
            x, y = int(parts[0]), int(parts[1])
        except ValueError:
            raise ValetudoConfigurationError(f"Invalid spot coordinates on line {lineno}: {line!r}") from None
        spot = Spot(name=name, x=x, y=y)
        # Spot keys become entity unique_ids.
        if spot.key in seen:
            raise ValetudoConfigurationError(
                f"Spot {name!r} on line {lineno} clashes with spot {seen[spot.key]!r}; use distinct names"
            )
        seen[spot.key] = name
        spots.append(spot)
    return tuple(spots)


@dataclass(frozen=True)
class ValetudoConfig:
    host: str
    name: str = DEFAULT_NAME
    power_control: PowerControl | None = None
    spots: tuple[Spot, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ValetudoConfig:
        host = data.get(CONF_HOST)
        host = host.strip() if isinstance(host, str) else ""
        if not host:
            raise ValetudoConfigurationError("You must provide an ip address of the vacuum cleaner.")

        power_control = None
        if data.get(CONF_POWER_CONTROL):
            power_control = PowerControl.from_presets(
                data.get(CONF_DEFAULT_SPEED),
                data.get(CONF_HIGH_SPEED),
                bool(data.get(CONF_MOP_ENABLED, False)),
            )

        return cls(
            host=host,
            name=(data.get(CONF_NAME) or DEFAULT_NAME).strip() or DEFAULT_NAME,
            power_control=power_control,
            spots=parse_spots(data.get(CONF_SPOTS)),
        )
