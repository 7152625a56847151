"""Column formatters referenced by name from resource definitions.

Each formatter takes the raw extracted string and returns display text.
Unknown formatter names and values that do not parse are passed through
unchanged.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from nebterm.documents.extractor import MISSING

KB = 1024
MB = KB * 1024
GB = MB * 1024
TB = GB * 1024

VM_STATES = {
    0: "INIT",
    1: "PENDING",
    2: "HOLD",
    3: "ACTIVE",
    4: "STOPPED",
    5: "SUSPENDED",
    6: "DONE",
    8: "POWEROFF",
    9: "UNDEPLOYED",
    10: "CLONING",
    11: "CLONING_FAILURE",
}

LCM_STATES = dict(enumerate([
    "LCM_INIT", "PROLOG", "BOOT", "RUNNING", "MIGRATE", "SAVE_STOP",
    "SAVE_SUSPEND", "SAVE_MIGRATE", "PROLOG_MIGRATE", "PROLOG_RESUME",
    "EPILOG_STOP", "EPILOG", "SHUTDOWN", None, "CLEANUP_RESUBMIT", "UNKNOWN",
    "HOTPLUG", "SHUTDOWN_POWEROFF", "BOOT_UNKNOWN", "BOOT_POWEROFF",
    "BOOT_SUSPENDED", "BOOT_STOPPED", "CLEANUP_DELETE", "HOTPLUG_SNAPSHOT",
    "HOTPLUG_NIC", "HOTPLUG_SAVEAS", "HOTPLUG_SAVEAS_POWEROFF",
    "HOTPLUG_SAVEAS_SUSPENDED", "SHUTDOWN_UNDEPLOY", "EPILOG_UNDEPLOY",
    "PROLOG_UNDEPLOY", "BOOT_UNDEPLOY", "HOTPLUG_PROLOG_POWEROFF",
    "HOTPLUG_EPILOG_POWEROFF", "BOOT_MIGRATE", "BOOT_FAILURE",
    "BOOT_MIGRATE_FAILURE", "PROLOG_MIGRATE_FAILURE", "PROLOG_FAILURE",
    "EPILOG_FAILURE", "EPILOG_STOP_FAILURE", "EPILOG_UNDEPLOY_FAILURE",
    "PROLOG_MIGRATE_POWEROFF", "PROLOG_MIGRATE_POWEROFF_FAILURE",
    "PROLOG_MIGRATE_SUSPEND", "PROLOG_MIGRATE_SUSPEND_FAILURE",
    "BOOT_UNDEPLOY_FAILURE", "BOOT_STOPPED_FAILURE", "PROLOG_RESUME_FAILURE",
    "PROLOG_UNDEPLOY_FAILURE", "DISK_SNAPSHOT_POWEROFF",
    "DISK_SNAPSHOT_REVERT_POWEROFF", "DISK_SNAPSHOT_DELETE_POWEROFF",
    "DISK_SNAPSHOT_SUSPENDED", "DISK_SNAPSHOT_REVERT_SUSPENDED",
    "DISK_SNAPSHOT_DELETE_SUSPENDED", "DISK_SNAPSHOT", "DISK_SNAPSHOT_REVERT",
    "DISK_SNAPSHOT_DELETE", "PROLOG_MIGRATE_UNKNOWN",
    "PROLOG_MIGRATE_UNKNOWN_FAILURE", "DISK_RESIZE", "DISK_RESIZE_POWEROFF",
    "DISK_RESIZE_UNDEPLOYED", "HOTPLUG_NIC_POWEROFF", "HOTPLUG_RESIZE",
    "HOTPLUG_SAVEAS_UNDEPLOYED", "HOTPLUG_SAVEAS_STOPPED", "BACKUP",
    "BACKUP_POWEROFF",
]))
# 13 is unused by the remote API
del LCM_STATES[13]

HOST_STATES = {
    0: "INIT",
    1: "MONITORING_MONITORED",
    2: "MONITORED",
    3: "ERROR",
    4: "DISABLED",
    5: "MONITORING_ERROR",
    6: "MONITORING_INIT",
    7: "MONITORING_DISABLED",
    8: "OFFLINE",
}

IMAGE_STATES = {
    0: "INIT",
    1: "READY",
    2: "USED",
    3: "DISABLED",
    4: "LOCKED",
    5: "ERROR",
    6: "CLONE",
    7: "DELETE",
    8: "USED_PERS",
    9: "LOCKED_USED",
    10: "LOCKED_USED_PERS",
}

DATASTORE_STATES = {
    0: "READY",
    1: "DISABLED",
}


def format_bytes(count: int) -> str:
    """Human readable size, e.g. 1536 -> '1.5 KB'."""
    if count >= TB:
        return f"{count / TB:.1f} TB"
    if count >= GB:
        return f"{count / GB:.1f} GB"
    if count >= MB:
        return f"{count / MB:.1f} MB"
    if count >= KB:
        return f"{count / KB:.1f} KB"
    return f"{count} B"


def _state_formatter(states: dict[int, str], unknown: str) -> Callable[[int], str]:
    def formatter(code: int) -> str:
        return states.get(code, f"{unknown}({code})")
    return formatter


def _format_timestamp(epoch: int) -> str:
    if epoch <= 0:
        return MISSING
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


FORMATTERS: dict[str, Callable[[int], str]] = {
    "bytes": format_bytes,
    "kilobytes": lambda n: format_bytes(n * KB),
    "megabytes": lambda n: format_bytes(n * MB),
    "vm_state": _state_formatter(VM_STATES, "UNKNOWN"),
    "lcm_state": _state_formatter(LCM_STATES, "LCM_UNKNOWN"),
    "host_state": _state_formatter(HOST_STATES, "UNKNOWN"),
    "image_state": _state_formatter(IMAGE_STATES, "UNKNOWN"),
    "datastore_state": _state_formatter(DATASTORE_STATES, "UNKNOWN"),
    "timestamp": _format_timestamp,
}


def format_value(format_name: Optional[str], raw: str) -> str:
    """Apply the named formatter to an extracted value."""
    if not format_name or raw == MISSING:
        return raw
    formatter = FORMATTERS.get(format_name)
    if formatter is None:
        return raw
    try:
        number = int(raw)
    except ValueError:
        return raw
    return formatter(number)
