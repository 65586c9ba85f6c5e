"""
This is the main orchestrator for the Ansible module generation process.

It validates the generator configuration, turns every configured resource
definition into a `GenerationContext` and renders one module file per
definition into an Ansible collection tree.
"""

import os
import sys
from pprint import pformat
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader
from pydantic import ValidationError

from ansible_ibm_provider.config import CollectionConfig, GeneratorConfig
from ansible_ibm_provider.helpers import AUTH_FIXTURE, ValidationErrorCollector
from ansible_ibm_provider.models import GenerationContext, ResourceDefinition
from ansible_ibm_provider.resources.registry import DEFINITIONS

DEFAULT_TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

# Keys of an option that `AnsibleModule` understands.
ARGUMENT_SPEC_KEYS = {"type", "choices", "default", "no_log", "required", "elements"}

# Keys of an option that are valid in the DOCUMENTATION block.
VALID_DOC_KEYS = {
    "description",
    "required",
    "type",
    "default",
    "choices",
    "no_log",
    "elements",
}


def to_yaml(value) -> str:
    return yaml.safe_dump(value, sort_keys=False, default_flow_style=False, width=120)


def to_python(value) -> str:
    return pformat(value, sort_dicts=False, width=100)


def build_argument_spec(parameters: dict[str, Any]) -> dict:
    """
    Strips the rich parameter definitions (descriptions, etc.) down to the
    structure `AnsibleModule` expects. Nested `options` are handled recursively.
    """
    spec = {}
    for name, opts in parameters.items():
        param_spec = {key: value for key, value in opts.items() if key in ARGUMENT_SPEC_KEYS}
        if opts.get("choices") is None:
            param_spec.pop("choices", None)
        if "options" in opts:
            param_spec["options"] = build_argument_spec(opts["options"])
        spec[name] = param_spec
    return spec


def clean_parameters_for_documentation(parameters: dict[str, Any]) -> dict:
    """
    Keeps only the keys that are valid in DOCUMENTATION. Nested `options`
    become `suboptions`.
    """
    cleaned = {}
    for name, opts in parameters.items():
        clean_opts = {}
        for key, value in opts.items():
            if key not in VALID_DOC_KEYS:
                continue
            if key == "choices" and not value:
                continue
            if key == "no_log" and not value:
                continue
            clean_opts[key] = value
        if "options" in opts:
            clean_opts["suboptions"] = clean_parameters_for_documentation(opts["options"])
        cleaned[name] = clean_opts
    return cleaned


def commands_return_block() -> dict[str, Any]:
    """Returns the static documentation block for the 'commands' output."""
    return {
        "description": "A list of HTTP requests that were made (or would be made in check mode) to execute the task.",
        "type": "list",
        "returned": "always",
        "elements": "dict",
        "contains": {
            "method": {
                "description": "The HTTP method used (e.g., POST, PATCH, DELETE).",
                "type": "str",
                "sample": "POST",
            },
            "url": {
                "description": "The fully qualified URL of the API endpoint.",
                "type": "str",
                "sample": "https://sm.example.cloud.ibm.com/api/v1/secret_groups",
            },
            "description": {
                "description": "A human-readable summary of the command's purpose.",
                "type": "str",
                "sample": "Create secret group",
            },
            "body": {
                "description": "The JSON payload sent with the request. Only present for methods with a body.",
                "type": "dict",
                "returned": "if applicable",
            },
            "diff": {
                "description": "The changes the command applies.",
                "type": "raw",
            },
        },
    }


class Generator:
    """Orchestrates the Ansible module generation process."""

    def __init__(self, config_data, template_dir=DEFAULT_TEMPLATE_DIR, definitions=None):
        """
        Initializes the generator with the configuration data.

        Args:
            config_data (dict): The generator configuration data.
            template_dir (str): Path to the directory with Jinja2 templates.
            definitions (dict): Module name to `ResourceDefinition`. Defaults
                to every module of this package.
        """
        self.config_data = config_data
        self.definitions = DEFINITIONS if definitions is None else definitions
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir), trim_blocks=True, lstrip_blocks=True
        )
        self.jinja_env.filters["to_yaml"] = to_yaml
        self.jinja_env.filters["to_python"] = to_python

    @classmethod
    def from_files(cls, config_path, template_dir=DEFAULT_TEMPLATE_DIR):
        """Creates a Generator instance by loading the configuration from a file."""
        try:
            with open(config_path, "r") as f:
                config_data = yaml.safe_load(f)
        except (IOError, yaml.YAMLError) as e:
            print(
                f"Error reading or parsing config file '{config_path}': {e}",
                file=sys.stderr,
            )
            sys.exit(1)

        return cls(config_data or {}, template_dir)

    def parse_config(self, collector: ValidationErrorCollector) -> GeneratorConfig | None:
        try:
            config = GeneratorConfig.model_validate(self.config_data)
        except ValidationError as e:
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                collector.add_error(f"{location}: {error['msg']}")
            return None

        for collection in config.collections:
            for module_name in collection.modules:
                if module_name not in self.definitions:
                    collector.add_error(
                        f"Collection '{collection.fqcn_prefix}': unknown module '{module_name}'."
                    )
        return config

    def _build_documentation(self, definition: ResourceDefinition, collection: CollectionConfig) -> dict:
        description = [definition.description or definition.short_description]
        update_fields = definition.context.get("update_fields")
        if update_fields:
            description.append(
                "When the resource already exists, the following fields can be"
                f" updated: {', '.join(sorted(update_fields))}."
            )
        force_new = definition.context.get("force_new_fields")
        if force_new:
            description.append(
                "Changing any of these fields fails, the resource must be"
                f" re-created instead: {', '.join(sorted(force_new))}."
            )
        return {
            "module": definition.name,
            "short_description": definition.short_description,
            "description": description,
            "author": collection.authors,
            "options": clean_parameters_for_documentation(definition.parameters),
            "requirements": ["python >= 3.10", "ansible-ibm-provider"],
        }

    def _build_examples(self, definition: ResourceDefinition, collection: CollectionConfig) -> list[dict]:
        fqcn = f"{collection.fqcn_prefix}.{definition.name}"
        return [
            {
                "name": example["name"],
                "hosts": "localhost",
                "tasks": [
                    {
                        "name": example["name"],
                        fqcn: {**AUTH_FIXTURE, **example["params"]},
                    }
                ],
            }
            for example in definition.examples
        ]

    def _build_return_block(self, definition: ResourceDefinition) -> dict:
        return_block = dict(definition.return_block)
        if definition.kind == "facts":
            return_block.setdefault(
                "resources",
                {
                    "description": f"The listed {definition.context['resource_type']}.",
                    "type": "list",
                    "returned": "success",
                },
            )
            return_block.setdefault(
                "metadata",
                {
                    "description": "The collection metadata reported by the service.",
                    "type": "dict",
                    "returned": "when reported",
                },
            )
            return return_block

        resource_type = definition.context["resource_type"]
        return_block.setdefault(
            "id",
            {
                "description": f"The identifier of the {resource_type}.",
                "type": "str",
                "returned": "when the resource exists",
            },
        )
        return_block.setdefault(
            "resource",
            {
                "description": f"The state of the {resource_type} after the operation.",
                "type": "dict",
                "returned": "when the resource exists",
            },
        )
        return_block["commands"] = commands_return_block()
        return return_block

    def build_context(self, definition: ResourceDefinition, collection: CollectionConfig) -> GenerationContext:
        runner_module, runner_class = definition.runner_import
        return GenerationContext(
            module_name=definition.name,
            argument_spec=build_argument_spec(definition.parameters),
            documentation=self._build_documentation(definition, collection),
            examples=self._build_examples(definition, collection),
            return_block=self._build_return_block(definition),
            runner_module=runner_module,
            runner_class=runner_class,
            required_if=definition.required_if,
            mutually_exclusive=definition.mutually_exclusive,
        )

    def _get_collection_root(self, output_dir: str, collection: CollectionConfig) -> str:
        return os.path.join(output_dir, "ansible_collections", collection.namespace, collection.name)

    def _write_galaxy(self, collection_root: str, collection: CollectionConfig):
        galaxy = {
            "namespace": collection.namespace,
            "name": collection.name,
            "version": collection.version,
            "readme": "README.md",
            "authors": collection.authors,
            "description": collection.description,
            "license": [collection.license],
            "tags": ["ibm", "cloud"],
            "dependencies": {},
        }
        with open(os.path.join(collection_root, "galaxy.yml"), "w") as f:
            f.write(to_yaml(galaxy))
        with open(os.path.join(collection_root, "README.md"), "w") as f:
            f.write(f"# {collection.fqcn_prefix}\n\n{collection.description}\n")

    def generate(self, output_dir: str):
        """
        Runs the full generation process for all collections defined in the configuration.
        """
        collector = ValidationErrorCollector()
        config = self.parse_config(collector)
        collector.report()

        template = self.jinja_env.get_template("resource_module.py.j2")
        for collection in config.collections:
            collection_root = self._get_collection_root(output_dir, collection)
            modules_dir = os.path.join(collection_root, "plugins", "modules")
            os.makedirs(modules_dir, exist_ok=True)
            self._write_galaxy(collection_root, collection)

            for module_name in collection.modules:
                context = self.build_context(self.definitions[module_name], collection)
                output_path = os.path.join(modules_dir, context.module_filename)
                with open(output_path, "w") as f:
                    f.write(template.render(context.to_dict()))
                print(f"Successfully generated module: {output_path}")
