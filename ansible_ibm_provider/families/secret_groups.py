"""Secret group records and the collection envelope metadata."""

from ansible_ibm_provider.marshal.fields import build_model, integer, string, timestamp

CollectionMetadata = build_model(
    "CollectionMetadata",
    [
        string("collection_type", required=True),
        integer("collection_total", required=True),
    ],
)

SecretGroup = build_model(
    "SecretGroup",
    [
        string("id"),
        string("name", required=True),
        string("description"),
        timestamp("creation_date"),
        timestamp("last_update_date"),
        string("type"),
    ],
)

# Only these travel in create and update requests.
SECRET_GROUP_WRITABLE_FIELDS = ["name", "description"]
