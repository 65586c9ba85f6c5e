from ansible_ibm_provider.families.notifications import NotificationsRegistration
from ansible_ibm_provider.helpers import AUTH_OPTIONS
from ansible_ibm_provider.marshal.family import decode_record, encode_record
from ansible_ibm_provider.models import ResourceDefinition
from ansible_ibm_provider.plugins.crud.runner import CrudRunner

REGISTRATION_FIELDS = [
    "event_notifications_instance_crn",
    "event_notifications_source_name",
    "event_notifications_source_description",
]


class EventNotificationRunner(CrudRunner):
    """
    An instance has at most one Event Notifications registration, so it is
    always read from the same endpoint and identified by the connected
    instance's CRN. Nothing can be changed in place.
    """

    def check_existence(self):
        self.resource = self.read(None)
        if self.resource:
            self.identifier = self.resource.get("event_notifications_instance_crn")

    def path_params(self, identifier):
        return None

    def decode(self, payload):
        return decode_record(NotificationsRegistration, payload)

    def identifier_from_response(self, response) -> str:
        return response["event_notifications_instance_crn"]

    def build_create_request(self) -> dict:
        registration = decode_record(
            NotificationsRegistration,
            {key: self.params.get(key) for key in REGISTRATION_FIELDS},
        )
        return encode_record(registration, wrap_nested=False)


DEFINITION = ResourceDefinition(
    name="ibm_sm_event_notification",
    kind="crud",
    short_description="Register a Secrets Manager instance with Event Notifications.",
    description=(
        "Connects the instance to an Event Notifications instance so that secret "
        "lifecycle events are forwarded. A registration cannot be changed; "
        "remove it and register again instead."
    ),
    runner=EventNotificationRunner,
    context={
        "resource_type": "event notifications registration",
        "create_path": "/api/v1/notifications/registration",
        "read_path": "/api/v1/notifications/registration",
        "delete_path": "/api/v1/notifications/registration",
        "force_new_fields": REGISTRATION_FIELDS,
    },
    parameters={
        **AUTH_OPTIONS,
        "state": {
            "description": "Should the registration be present or absent.",
            "choices": ["present", "absent"],
            "default": "present",
            "type": "str",
        },
        "event_notifications_instance_crn": {
            "description": "The Cloud Resource Name (CRN) of the connected Event Notifications instance.",
            "type": "str",
            "required": True,
        },
        "event_notifications_source_name": {
            "description": "The name that is displayed as a source in your Event Notifications instance.",
            "type": "str",
            "required": True,
        },
        "event_notifications_source_description": {
            "description": "An optional description for the source in your Event Notifications instance.",
            "type": "str",
        },
    },
    examples=[
        {
            "name": "Forward secret events to Event Notifications",
            "params": {
                "event_notifications_instance_crn": "crn:v1:bluemix:public:event-notifications:us-south:a/1234:5678::",
                "event_notifications_source_name": "prod-secrets",
                "event_notifications_source_description": "Secrets Manager in production.",
            },
        },
    ],
)
