"""Section builders: pure functions from a raw snapshot to report sections."""

from .faults import build_faults
from .inventory import (
    build_chassis_inventory,
    build_fi_inventory,
    build_iom_inventory,
    build_server_inventory,
)
from .lan import build_lan
from .policies import build_policies
from .profiles import build_profiles
from .san import build_san
from .system import build_system, domain_name

__all__ = [
    "build_chassis_inventory",
    "build_faults",
    "build_fi_inventory",
    "build_iom_inventory",
    "build_lan",
    "build_policies",
    "build_profiles",
    "build_san",
    "build_server_inventory",
    "build_system",
    "domain_name",
]
