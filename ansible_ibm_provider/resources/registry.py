"""Lookup of every module this collection can generate."""

from ansible_ibm_provider.models import ResourceDefinition
from ansible_ibm_provider.resources import (
    dl_gateway,
    sm_cert_configuration,
    sm_event_notification,
    sm_facts,
    sm_secret,
    sm_secret_group,
)

DEFINITIONS: dict[str, ResourceDefinition] = {
    definition.name: definition
    for definition in [
        dl_gateway.DEFINITION,
        sm_secret.DEFINITION,
        sm_secret_group.DEFINITION,
        sm_cert_configuration.DEFINITION,
        sm_event_notification.DEFINITION,
        *sm_facts.DEFINITIONS,
    ]
}


def get_definition(name: str) -> ResourceDefinition:
    try:
        return DEFINITIONS[name]
    except KeyError:
        known = ", ".join(sorted(DEFINITIONS))
        raise KeyError(f"Unknown module '{name}'. Known modules: {known}") from None
