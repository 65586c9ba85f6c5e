"""Event Notifications registration of a Secrets Manager instance."""

from ansible_ibm_provider.marshal.fields import build_model, string

NotificationsRegistration = build_model(
    "NotificationsRegistration",
    [
        string("event_notifications_instance_crn", required=True),
        string("event_notifications_source_name"),
        string("event_notifications_source_description"),
    ],
)
