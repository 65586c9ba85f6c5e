import logging

from ansible_ibm_provider.errors import ForceNewChange, NotFound, ProviderError
from ansible_ibm_provider.interfaces.command import (
    CreateCommand,
    DeleteCommand,
    UpdateCommand,
)
from ansible_ibm_provider.interfaces.runner import BaseRunner
from ansible_ibm_provider.marshal.family import encode_record

logger = logging.getLogger(__name__)


class CrudRunner(BaseRunner):
    """
    Drives the lifecycle of a single remote resource.

    The runner reconciles the desired `state` with what the service reports:

    - present and missing: create it, then read it back.
    - present and found: update the mutable fields that differ. A differing
      field that can only be set at creation time is an error.
    - absent and found: delete it.
    - absent and missing: nothing to do.

    The `context` dictionary configures it:

    - `resource_type`: human-readable name used in messages.
    - `create_path`, `read_path`, `update_path`, `delete_path`: endpoint
      templates. `update_path` may be omitted for resources that cannot be
      updated in place.
    - `update_method`: HTTP method of updates, `PATCH` by default.
    - `update_fields`: parameters that can be changed in place.
    - `force_new_fields`: parameters that can only be set at creation time.
    - `list_path` (optional): collection endpoint used to find an existing
      resource by `name` when no identifier is known.

    Subclasses provide the resource-specific translation between module
    parameters, request bodies and responses.
    """

    def run(self):
        """
        The main execution entrypoint for the runner. It orchestrates the entire
        module lifecycle based on the desired state and whether the resource
        currently exists.
        """
        try:
            self.validate()
            self.check_existence()
            self.plan()

            if self.module.check_mode:
                self.has_changed = bool(self.commands)
            else:
                self.apply()
        except ProviderError as e:
            self.fail(e)
            return

        self.exit()

    # Hooks

    def validate(self):
        """Checks parameter combinations that `argument_spec` cannot express."""

    def resolve_identifier(self) -> str | None:
        """Returns the identifier of the managed resource if it is known up front."""
        return self.params.get("id")

    def path_params(self, identifier: str) -> dict:
        return {"id": identifier}

    def create_path_params(self) -> dict | None:
        return None

    def decode(self, payload: dict):
        """Turns a response body into a typed record."""
        raise NotImplementedError

    def flatten(self, record) -> dict:
        """Turns a typed record into the module's parameter shape."""
        return encode_record(record, wrap_nested=False)

    def build_create_request(self) -> dict:
        raise NotImplementedError

    def build_update_request(self, changes: list) -> dict:
        return {change["param"]: change["new"] for change in changes}

    def identifier_from_response(self, response) -> str:
        return response["id"]

    def after_create(self, response):
        """Runs after a successful create request, before the resource is read back."""

    def desired_state(self) -> dict:
        return self.params

    def current_state(self) -> dict:
        return self.resource

    def list_items(self, body) -> list:
        if isinstance(body, list):
            return body
        return (body or {}).get("resources") or []

    # Lifecycle

    def exists(self) -> bool:
        return self.resource is not None

    def read(self, identifier: str) -> dict | None:
        """
        Fetches the resource and returns it in parameter shape, or None when
        the service reports it as missing.
        """
        try:
            body, _ = self.client.send_request(
                "GET",
                self.context["read_path"],
                path_params=self.path_params(identifier),
                operation=f"Read {self.context['resource_type']}",
                identifier=identifier,
            )
        except NotFound:
            logger.info("%s %s is gone", self.context["resource_type"], identifier)
            return None
        if not body:
            return None
        return self.flatten(self.decode(body))

    def lookup_by_name(self, name: str) -> dict | None:
        body, _ = self.client.send_request(
            "GET",
            self.context["list_path"],
            operation=f"List {self.context['resource_type']}",
        )
        for item in self.list_items(body):
            if item.get("name") == name:
                return item
        return None

    def check_existence(self):
        """
        Finds the resource, either by its identifier or, when the identifier is
        unknown, by an exact name match in the collection.
        """
        self.identifier = self.resolve_identifier()
        if self.identifier:
            self.resource = self.read(self.identifier)
            if self.resource is None:
                # A stale identifier is the same as no resource at all.
                self.identifier = None
            return

        name = self.params.get("name")
        if self.context.get("list_path") and name:
            item = self.lookup_by_name(name)
            if item is not None:
                self.identifier = self.identifier_from_response(item)
                self.resource = self.flatten(self.decode(item))

    def detect_changes(self) -> list:
        """
        Compares the desired state with the current one.

        Raises:
            ForceNewChange: if a creation-only field differs.
        """
        desired = self.desired_state()
        current = self.current_state() or {}

        for field in self.context.get("force_new_fields", []):
            value = desired.get(field)
            if value is not None and field in current and self.values_differ(
                value, current.get(field)
            ):
                raise ForceNewChange(field)

        changes = []
        for field in self.context.get("update_fields", []):
            value = desired.get(field)
            if value is not None and self.values_differ(value, current.get(field)):
                changes.append({"param": field, "old": current.get(field), "new": value})
        return changes

    def plan(self):
        state = self.params.get("state", "present")
        resource_type = self.context["resource_type"]

        if state == "present" and not self.exists():
            self.commands.append(
                CreateCommand(
                    self,
                    self.context["create_path"],
                    self.build_create_request(),
                    path_params=self.create_path_params(),
                )
            )
        elif state == "present":
            changes = self.detect_changes()
            if changes:
                if not self.context.get("update_path"):
                    raise ForceNewChange(changes[0]["param"])
                self.commands.append(
                    UpdateCommand(
                        self,
                        self.context["update_path"],
                        self.build_update_request(changes),
                        changes,
                        path_params=self.path_params(self.identifier),
                        method=self.context.get("update_method", "PATCH"),
                    )
                )
        elif self.exists():
            self.commands.append(
                DeleteCommand(
                    self,
                    self.context["delete_path"],
                    self.resource,
                    path_params=self.path_params(self.identifier),
                )
            )

        logger.debug("Planned %s command(s) for %s", len(self.commands), resource_type)

    def apply(self):
        for command in self.commands:
            if isinstance(command, CreateCommand):
                response = command.execute()
                self.identifier = self.identifier_from_response(response)
                self.after_create(response)
                self.resource = self.read(self.identifier)
            elif isinstance(command, UpdateCommand):
                command.execute()
                self.resource = self.read(self.identifier)
            elif isinstance(command, DeleteCommand):
                try:
                    command.execute()
                except NotFound:
                    logger.info("%s was already deleted", self.identifier)
                self.resource = None
                self.identifier = None
            self.has_changed = True
