from datetime import timedelta

DOMAIN = "valetudo_vacuum"

CONF_HOST = "host"
CONF_NAME = "name"
CONF_POWER_CONTROL = "power_control"
CONF_DEFAULT_SPEED = "default_speed"
CONF_HIGH_SPEED = "high_speed"
CONF_MOP_ENABLED = "mop_enabled"
CONF_SPOTS = "spots"

DEFAULT_NAME = "Vacuum"
DEFAULT_SPEED_PRESET = "quiet"
DEFAULT_HIGH_SPEED_PRESET = "turbo"

PLATFORMS: list[str] = ["sensor", "binary_sensor", "switch", "button", "number", "select"]

# Polling cadence. The device is slow to answer, so back off while it sits in the dock.
IDLE_SCAN_INTERVAL = timedelta(seconds=120)
ACTIVE_SCAN_INTERVAL = timedelta(seconds=10)

# Time the robot needs before /api/current_status reflects a command.
SETTLE_DELAY_SECONDS = 3.0

REQUEST_TIMEOUT_SECONDS = 10.0

LOW_BATTERY_THRESHOLD = 20

MUTE_VOLUME = 1
UNMUTE_VOLUME = 100
MUTED_BELOW_VOLUME = 10

MANUFACTURER = "Xiaomi"
MODEL = "Roborock"
