from pydantic import BaseModel, Field, field_validator


class CollectionConfig(BaseModel):
    """One Ansible collection and the modules rendered into it."""

    namespace: str
    name: str
    version: str = "1.0.0"
    description: str | None = Field(default=None, validate_default=True)
    authors: list[str] = Field(default_factory=lambda: ["IBM Cloud Ansible Team"])
    license: str = "MPL-2.0"
    modules: list[str] = Field(default_factory=list)

    @field_validator("namespace", "name")
    def check_identifier(cls, v):
        if not v.isidentifier() or not v.islower():
            raise ValueError(
                f"'{v}' must be a lowercase identifier to be a valid collection name part"
            )
        return v

    @field_validator("description", mode="before")
    def set_description(cls, v, values):
        if v is None:
            data = values.data
            return f"Ansible modules for {data.get('namespace', '')}.{data.get('name', '')}."
        return v

    @property
    def fqcn_prefix(self) -> str:
        return f"{self.namespace}.{self.name}"


class GeneratorConfig(BaseModel):
    """Top-level structure of `generator_config.yaml`."""

    collections: list[CollectionConfig] = Field(default_factory=list)
