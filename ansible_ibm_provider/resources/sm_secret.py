from ansible_ibm_provider.errors import ParameterError
from ansible_ibm_provider.families.secrets import (
    SECRET_METADATA_FIELDS,
    SECRET_READ_ONLY_FIELDS,
    SECRET_RESOURCE_FAMILY,
    SecretType,
)
from ansible_ibm_provider.helpers import (
    AUTH_OPTIONS,
    SECRET_COLLECTION_TYPE,
    STATE_OPTIONS,
    collection_envelope,
)
from ansible_ibm_provider.identifiers import join_identifier, split_identifier
from ansible_ibm_provider.marshal.family import encode_record
from ansible_ibm_provider.marshal.fields import missing_fields
from ansible_ibm_provider.models import ResourceDefinition
from ansible_ibm_provider.plugins.crud.runner import CrudRunner
from ansible_ibm_provider.resources.sm_secret_group import unwrap_envelope


class SecretRunner(CrudRunner):
    """
    Manages a secret of any type. The identifier is `<secret_type>/<id>`.

    Only the metadata of an existing secret can be changed in place. The
    `secret_resource` option carries the type-specific fields and is decoded
    through the secret variant family, so fields that do not belong to the
    selected `secret_type` are never sent.
    """

    def validate(self):
        if self.params.get("state", "present") == "present" and not self.params.get(
            "secret_resource"
        ):
            raise ParameterError("'secret_resource' is required when state is present.")
        if self.params.get("id"):
            secret_type, _ = split_identifier(self.params["id"], 2)
            SECRET_RESOURCE_FAMILY.value_of(secret_type)

    def path_params(self, identifier):
        secret_type, secret_id = split_identifier(identifier, 2)
        return {"secret_type": secret_type, "id": secret_id}

    def create_path_params(self):
        return {"secret_type": self.params["secret_type"]}

    def lookup_by_name(self, name):
        body, _ = self.client.send_request(
            "GET",
            self.context["list_path"],
            query_params={"search": name},
            path_params={"secret_type": self.params["secret_type"]},
            operation=f"List {self.context['resource_type']}",
        )
        group = (self.params.get("secret_resource") or {}).get("secret_group_id")
        for item in self.list_items(body):
            if item.get("name") != name:
                continue
            if group and item.get("secret_group_id") not in (None, group):
                continue
            return item
        return None

    def check_existence(self):
        if not self.params.get("id"):
            # Secrets are looked up by the name inside `secret_resource`.
            name = (self.params.get("secret_resource") or {}).get("name")
            if name:
                item = self.lookup_by_name(name)
                if item is not None:
                    self.identifier = self.identifier_from_response(item)
                    self.resource = self.flatten(self.decode(item))
            return
        super().check_existence()

    def decode(self, payload):
        item = unwrap_envelope(payload)
        secret_type = item.get("secret_type") or self.params["secret_type"]
        return SECRET_RESOURCE_FAMILY.decode(item, discriminator_value=secret_type)

    def flatten(self, record) -> dict:
        return {
            "secret_type": SECRET_RESOURCE_FAMILY.discriminate(record).value,
            "secret_resource": encode_record(record, wrap_nested=False),
        }

    def identifier_from_response(self, response) -> str:
        item = unwrap_envelope(response)
        secret_type = item.get("secret_type") or self.params["secret_type"]
        return join_identifier(secret_type, item["id"])

    def desired_record(self):
        return SECRET_RESOURCE_FAMILY.decode(
            self.params.get("secret_resource") or {},
            discriminator_value=self.params["secret_type"],
        )

    def desired_state(self) -> dict:
        flat = encode_record(self.desired_record(), wrap_nested=False)
        return {**flat, "secret_type": self.params["secret_type"]}

    def current_state(self) -> dict:
        if not self.resource:
            return {}
        return {
            **self.resource["secret_resource"],
            "secret_type": self.resource["secret_type"],
        }

    def build_create_request(self) -> dict:
        record = self.desired_record()
        missing = missing_fields(record)
        if missing:
            raise ParameterError(
                f"A {self.params['secret_type']} secret requires "
                f"{', '.join(missing)} in 'secret_resource'."
            )
        body = SECRET_RESOURCE_FAMILY.encode_payload(record)
        for key in SECRET_READ_ONLY_FIELDS:
            body.pop(key, None)
        body.pop("secret_type", None)
        return collection_envelope(SECRET_COLLECTION_TYPE, [body])

    def build_update_request(self, changes: list) -> dict:
        # The metadata endpoint always needs the name.
        metadata = {"name": self.current_state().get("name")}
        metadata.update({change["param"]: change["new"] for change in changes})
        return collection_envelope(SECRET_COLLECTION_TYPE, [metadata])


SECRET_RESOURCE_OPTION = {
    "description": (
        "The type-specific fields of the secret, for example `name`, `payload`, "
        "`username` and `password`, `certificate`, `ttl` or `rotation`. Fields "
        "that do not belong to `secret_type` are ignored."
    ),
    "type": "dict",
    "no_log": True,
}

DEFINITION = ResourceDefinition(
    name="ibm_sm_secret",
    kind="crud",
    short_description="Manage Secrets Manager secrets.",
    description=(
        "Creates, updates and deletes secrets of every supported type. An existing "
        "secret is found by `id` (`<secret_type>/<secret id>`) or by the name given "
        "in `secret_resource`. Only the metadata fields of an existing secret can "
        "be changed; a different `secret_type` requires a new secret."
    ),
    runner=SecretRunner,
    context={
        "resource_type": "secret",
        "list_path": "/api/v1/secrets/{secret_type}",
        "create_path": "/api/v1/secrets/{secret_type}",
        "read_path": "/api/v1/secrets/{secret_type}/{id}",
        "update_path": "/api/v1/secrets/{secret_type}/{id}/metadata",
        "delete_path": "/api/v1/secrets/{secret_type}/{id}",
        "update_method": "PUT",
        "update_fields": SECRET_METADATA_FIELDS,
        "force_new_fields": ["secret_type"],
    },
    parameters={
        **AUTH_OPTIONS,
        **STATE_OPTIONS,
        "secret_type": {
            "description": "The secret type.",
            "type": "str",
            "required": True,
            "choices": [member.value for member in SecretType],
        },
        "secret_resource": SECRET_RESOURCE_OPTION,
    },
    required_if=[["state", "present", ["secret_resource"]]],
    examples=[
        {
            "name": "Store an arbitrary secret",
            "params": {
                "secret_type": "arbitrary",
                "secret_resource": {
                    "name": "db-connection-string",
                    "description": "Connection string of the orders database.",
                    "labels": ["orders", "prod"],
                    "payload": "postgres://orders@db.internal/orders",
                },
            },
        },
        {
            "name": "Create IAM credentials with a one day lease",
            "params": {
                "secret_type": "iam_credentials",
                "secret_resource": {
                    "name": "ci-deployer",
                    "access_groups": ["AccessGroupId-1234"],
                    "ttl": "24h",
                },
            },
        },
        {
            "name": "Remove a secret",
            "params": {
                "secret_type": "arbitrary",
                "id": "arbitrary/0f3fe6a9-0fb3-4b4b-ae6b-8d5a41fa9d4b",
                "state": "absent",
            },
        },
    ],
)
