from ansible_ibm_provider.families.secret_groups import (
    SECRET_GROUP_WRITABLE_FIELDS,
    SecretGroup,
)
from ansible_ibm_provider.helpers import (
    AUTH_OPTIONS,
    SECRET_GROUP_COLLECTION_TYPE,
    STATE_OPTIONS,
    collection_envelope,
    first_item,
)
from ansible_ibm_provider.marshal.family import decode_record, encode_record
from ansible_ibm_provider.models import ResourceDefinition
from ansible_ibm_provider.plugins.crud.runner import CrudRunner


def unwrap_envelope(payload):
    """Returns the single resource of a collection envelope, or the payload itself."""
    if isinstance(payload, dict) and "resources" in payload:
        return first_item(payload["resources"])
    return payload


class SecretGroupRunner(CrudRunner):
    def decode(self, payload):
        return decode_record(SecretGroup, unwrap_envelope(payload))

    def identifier_from_response(self, response) -> str:
        return unwrap_envelope(response)["id"]

    def _request_body(self, values: dict) -> dict:
        group = decode_record(SecretGroup, values)
        return collection_envelope(
            SECRET_GROUP_COLLECTION_TYPE, [encode_record(group, wrap_nested=False)]
        )

    def build_create_request(self) -> dict:
        return self._request_body(
            {key: self.params.get(key) for key in SECRET_GROUP_WRITABLE_FIELDS}
        )

    def build_update_request(self, changes: list) -> dict:
        # The metadata endpoint replaces the group, so unchanged values are sent too.
        values = {key: self.resource.get(key) for key in SECRET_GROUP_WRITABLE_FIELDS}
        values.update({change["param"]: change["new"] for change in changes})
        return self._request_body(values)


DEFINITION = ResourceDefinition(
    name="ibm_sm_secret_group",
    kind="crud",
    short_description="Manage Secrets Manager secret groups.",
    description=(
        "Secret groups organize secrets and control who can access them. "
        "An existing group is found by `id` or, failing that, by its exact `name`."
    ),
    runner=SecretGroupRunner,
    context={
        "resource_type": "secret group",
        "list_path": "/api/v1/secret_groups",
        "create_path": "/api/v1/secret_groups",
        "read_path": "/api/v1/secret_groups/{id}",
        "update_path": "/api/v1/secret_groups/{id}",
        "delete_path": "/api/v1/secret_groups/{id}",
        "update_method": "PUT",
        "update_fields": ["name", "description"],
    },
    parameters={
        **AUTH_OPTIONS,
        **STATE_OPTIONS,
        "name": {
            "description": "A human-readable name for the secret group. It must be unique within the instance.",
            "type": "str",
            "required": True,
        },
        "description": {
            "description": "An extended description of the secret group.",
            "type": "str",
        },
    },
    examples=[
        {
            "name": "Create a secret group",
            "params": {
                "name": "payments-team",
                "description": "Secrets owned by the payments team.",
            },
        },
        {
            "name": "Remove a secret group",
            "params": {"name": "payments-team", "state": "absent"},
        },
    ],
)
