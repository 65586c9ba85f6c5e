"""Read-only listings of secrets, secret groups and certificate configurations."""

from ansible_ibm_provider.families.cert_configs import (
    CERT_CONFIG_FAMILY,
    ConfigElement,
    ConfigSecretType,
    flatten_config,
)
from ansible_ibm_provider.families.secret_groups import SecretGroup
from ansible_ibm_provider.families.secrets import SECRET_RESOURCE_FAMILY
from ansible_ibm_provider.helpers import AUTH_OPTIONS
from ansible_ibm_provider.models import ResourceDefinition
from ansible_ibm_provider.plugins.facts.runner import FactsRunner
from ansible_ibm_provider.resources.sm_cert_configuration import split_config


class SecretsFactsRunner(FactsRunner):
    """Every listed secret is decoded by its own `secret_type`."""

    def decode(self, item):
        return SECRET_RESOURCE_FAMILY.decode(item)

    def flatten(self, record) -> dict:
        flat = SECRET_RESOURCE_FAMILY.encode_payload(record)
        flat["secret_type"] = SECRET_RESOURCE_FAMILY.discriminate(record).value
        return flat


class CertConfigurationsFactsRunner(FactsRunner):
    def decode(self, item):
        return CERT_CONFIG_FAMILY.decode_payload(flatten_config(item))

    def flatten(self, record) -> dict:
        return split_config(CERT_CONFIG_FAMILY.encode_payload(record))


SECRETS_INFO = ResourceDefinition(
    name="ibm_sm_secrets_info",
    kind="facts",
    short_description="List Secrets Manager secrets.",
    description=(
        "Lists the secrets of an instance. Each secret is returned with the "
        "fields of its own `secret_type`. A secret of a type this collection "
        "does not know fails the module."
    ),
    runner=SecretsFactsRunner,
    context={
        "resource_type": "secrets",
        "list_path": "/api/v1/secrets",
        "query_params": ["limit", "offset", "search", "groups"],
    },
    parameters={
        **AUTH_OPTIONS,
        "limit": {
            "description": "The number of secrets to retrieve.",
            "type": "int",
        },
        "offset": {
            "description": "The number of secrets to skip.",
            "type": "int",
        },
        "search": {
            "description": "Filter secrets whose name or labels contain this text.",
            "type": "str",
        },
        "groups": {
            "description": "Filter secrets by secret group IDs. Use `default` for the default group.",
            "type": "list",
            "elements": "str",
        },
    },
    examples=[
        {
            "name": "List the secrets of the default group",
            "params": {"groups": ["default"], "limit": 50},
        },
    ],
    return_block={
        "resources": {
            "description": "The secrets, each with its `secret_type` and type-specific fields.",
            "type": "list",
            "returned": "success",
            "sample": [
                {
                    "id": "0f3fe6a9-0fb3-4b4b-ae6b-8d5a41fa9d4b",
                    "name": "db-connection-string",
                    "secret_type": "arbitrary",
                    "state_description": "Active",
                }
            ],
        },
    },
)

SECRET_GROUPS_INFO = ResourceDefinition(
    name="ibm_sm_secret_groups_info",
    kind="facts",
    short_description="List Secrets Manager secret groups.",
    runner=FactsRunner,
    context={
        "resource_type": "secret groups",
        "list_path": "/api/v1/secret_groups",
        "model": SecretGroup,
    },
    parameters={**AUTH_OPTIONS},
    examples=[{"name": "List all secret groups", "params": {}}],
    return_block={
        "resources": {
            "description": "The secret groups of the instance.",
            "type": "list",
            "returned": "success",
            "sample": [
                {
                    "id": "d898bb90-82f6-4d61-b5cc-b079b66cfa76",
                    "name": "payments-team",
                    "type": "application/vnd.ibm.secrets-manager.secret.group+json",
                }
            ],
        },
    },
)

CERT_CONFIGURATIONS_INFO = ResourceDefinition(
    name="ibm_sm_cert_configurations_info",
    kind="facts",
    short_description="List Secrets Manager certificate configurations.",
    runner=CertConfigurationsFactsRunner,
    context={
        "resource_type": "certificate configurations",
        "list_path": "/api/v1/config/{secret_type}/{config_element}",
        "path_params": ["secret_type", "config_element"],
    },
    parameters={
        **AUTH_OPTIONS,
        "secret_type": {
            "description": "The secret type the configurations belong to.",
            "type": "str",
            "required": True,
            "choices": [member.value for member in ConfigSecretType],
        },
        "config_element": {
            "description": "The configuration element to list.",
            "type": "str",
            "required": True,
            "choices": [member.value for member in ConfigElement],
        },
    },
    examples=[
        {
            "name": "List the configured DNS providers",
            "params": {"secret_type": "public_cert", "config_element": "dns_providers"},
        },
    ],
    return_block={
        "resources": {
            "description": "The configurations, with their type-specific settings under `config`.",
            "type": "list",
            "returned": "success",
        },
    },
)

DEFINITIONS = [SECRETS_INFO, SECRET_GROUPS_INFO, CERT_CONFIGURATIONS_INFO]
