"""Pure converters from Graph source records to graph entities."""

from __future__ import annotations

from .applications import (
    UNVERSIONED,
    create_detected_application_entity,
    create_managed_application_entity,
    find_newest_version,
    is_line_of_business,
    is_mobile,
)
from .common import parse_time_property
from .devices import (
    create_account_entity,
    create_host_agent_entity,
    create_managed_device_entity,
    create_user_entity,
    device_entity_type,
)
from .policies import (
    create_compliance_policy_entity,
    create_compliance_policy_state_entity,
    create_device_configuration_entity,
    create_device_configuration_state_entity,
)

__all__ = [
    "UNVERSIONED",
    "create_account_entity",
    "create_compliance_policy_entity",
    "create_compliance_policy_state_entity",
    "create_detected_application_entity",
    "create_device_configuration_entity",
    "create_device_configuration_state_entity",
    "create_host_agent_entity",
    "create_managed_application_entity",
    "create_managed_device_entity",
    "create_user_entity",
    "device_entity_type",
    "find_newest_version",
    "is_line_of_business",
    "is_mobile",
    "parse_time_property",
]
