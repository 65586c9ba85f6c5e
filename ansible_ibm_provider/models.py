"""
Core data structures shared by the resource definitions and the generator.

A `ResourceDefinition` describes one Ansible module: its options, the runner
that implements it and the static context that runner receives. The
generator turns a definition into a `GenerationContext` for the template.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

# A type alias for clarity, representing a dictionary of Ansible parameter options.
AnsibleModuleParams = Dict[str, Dict[str, Any]]


@dataclass(frozen=True)
class ResourceDefinition:
    """The complete description of one generated module."""

    name: str
    kind: str  # "crud" or "facts"
    short_description: str
    runner: type
    context: Dict[str, Any]
    parameters: AnsibleModuleParams
    description: str = ""
    api_version: str | None = None
    required_if: list = field(default_factory=list)
    mutually_exclusive: list = field(default_factory=list)
    examples: list[dict] = field(default_factory=list)
    return_block: Dict[str, Any] = field(default_factory=dict)

    @property
    def runner_import(self) -> tuple[str, str]:
        """The `(module path, class name)` the generated module imports."""
        return self.runner.__module__, self.runner.__name__


@dataclass
class GenerationContext:
    """
    Data object passed from the generator to the template. It contains simple,
    direct keys for the template to consume, keeping logic out of the template.
    """

    module_name: str

    argument_spec: dict

    # The full `DOCUMENTATION` block
    documentation: dict

    # The full `EXAMPLES` block
    examples: list[dict]

    # The full `RETURN` block
    return_block: dict

    runner_module: str
    runner_class: str

    required_if: list = field(default_factory=list)
    mutually_exclusive: list = field(default_factory=list)

    @property
    def module_filename(self) -> str:
        return f"{self.module_name}.py"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_name": self.module_name,
            "argument_spec": self.argument_spec,
            "documentation": self.documentation,
            "examples": self.examples,
            "return_block": self.return_block,
            "runner_module": self.runner_module,
            "runner_class": self.runner_class,
            "required_if": self.required_if,
            "mutually_exclusive": self.mutually_exclusive,
        }
