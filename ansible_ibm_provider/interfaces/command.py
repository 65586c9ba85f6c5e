from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseCommand(ABC):
    """
    Abstract base class for a command in the Command pattern.

    Each command holds everything needed for one write request: the method,
    the endpoint, the payload and a description of the change. Runners build
    the full list of commands first and only then execute them, which lets
    check mode report the plan without touching the remote service.
    """

    method: str = ""

    def __init__(
        self,
        runner,
        description: str,
        path: str,
        data: Dict[str, Any] | None = None,
        path_params: Dict[str, Any] | None = None,
    ):
        """
        Args:
            runner: The runner whose client executes the command.
            description (str): A human-readable summary of the command's purpose.
            path (str): The API endpoint, possibly with `{placeholders}`.
            data (dict, optional): The request body.
            path_params (dict, optional): Values for the path placeholders.
        """
        self.runner = runner
        self.description = description
        self.path = path
        self.data = data
        self.path_params = path_params

    def send(self) -> Any:
        resource, _ = self.runner.client.send_request(
            self.method,
            self.path,
            data=self.data,
            path_params=self.path_params,
            operation=self.description,
            identifier=self.runner.identifier,
        )
        return resource

    @abstractmethod
    def execute(self) -> Any:
        """
        Executes the command. This is the only place where a write operation
        (POST, PUT, PATCH, DELETE) is made against the API.
        """

    @abstractmethod
    def to_diff(self) -> Dict[str, Any]:
        """Describes the change this command makes."""

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the command for the module's `commands` output."""
        return {
            "description": self.description,
            "method": self.method,
            "url": self.runner.client.build_url(self.path, path_params=self.path_params),
            "body": self.data,
            "diff": self.to_diff(),
        }


class CreateCommand(BaseCommand):
    """A command to create a new resource via a POST request."""

    method = "POST"

    def __init__(self, runner, path, data, path_params=None):
        super().__init__(
            runner,
            f"Create {runner.context['resource_type']}",
            path,
            data,
            path_params,
        )

    def execute(self) -> Any:
        return self.send()

    def to_diff(self) -> Dict[str, Any]:
        return {"state": "Resource will be created.", "new_attributes": self.data}


class UpdateCommand(BaseCommand):
    """
    A command for in-place attribute updates. The HTTP method depends on the
    endpoint: some services PATCH the resource, others PUT a metadata body.
    """

    def __init__(self, runner, path, data, changes, path_params=None, method="PATCH"):
        """
        Args:
            changes (list): Structured change dictionaries, each of the form
                `{'param': str, 'old': any, 'new': any}`, used for the diff.
        """
        super().__init__(
            runner,
            f"Update attributes of {runner.context['resource_type']}",
            path,
            data,
            path_params,
        )
        self.changes = changes
        self.method = method

    def execute(self) -> Any:
        return self.send()

    def to_diff(self) -> Dict[str, Any]:
        return {"updated_attributes": self.changes}


class DeleteCommand(BaseCommand):
    """A command to delete an existing resource."""

    method = "DELETE"

    def __init__(self, runner, path, resource_to_delete, path_params=None):
        super().__init__(
            runner,
            f"Delete {runner.context['resource_type']}",
            path,
            None,
            path_params,
        )
        self.resource_to_delete = resource_to_delete

    def execute(self) -> Any:
        self.send()
        return None

    def to_diff(self) -> Dict[str, Any]:
        return {
            "state": "Resource will be deleted.",
            "old_attributes": self.resource_to_delete,
        }
