import pytest

from ansible_ibm_provider.errors import NotFound
from ansible_ibm_provider.resources.sm_event_notification import (
    DEFINITION,
    EventNotificationRunner,
)

EN_CRN = "crn:v1:bluemix:public:event-notifications:us-south:a/1234:5678::"

REGISTRATION = {
    "event_notifications_instance_crn": EN_CRN,
}


@pytest.fixture
def registration_params():
    return {
        "api_url": "https://api.example.com",
        "iam_token": "test-token",
        "state": "present",
        "event_notifications_instance_crn": EN_CRN,
        "event_notifications_source_name": "prod-secrets",
        "event_notifications_source_description": None,
    }


def make_runner(module, client):
    return EventNotificationRunner(module, DEFINITION.context, client)


class TestEventNotificationRunner:
    def test_register(self, mock_ansible_module, mock_client, registration_params):
        mock_ansible_module.params = registration_params
        mock_client.send_request.side_effect = [
            NotFound("Read event notifications registration"),
            (REGISTRATION, 201),
            (REGISTRATION, 200),
        ]

        make_runner(mock_ansible_module, mock_client).run()

        create_call = mock_client.send_request.call_args_list[1]
        assert create_call.args == ("POST", "/api/v1/notifications/registration")
        assert create_call.kwargs["data"] == {
            "event_notifications_instance_crn": EN_CRN,
            "event_notifications_source_name": "prod-secrets",
        }
        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is True
        assert kwargs["id"] == EN_CRN

    def test_already_registered(self, mock_ansible_module, mock_client, registration_params):
        mock_ansible_module.params = registration_params
        mock_client.send_request.return_value = (REGISTRATION, 200)

        make_runner(mock_ansible_module, mock_client).run()

        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is False
        assert kwargs["id"] == EN_CRN

    def test_other_instance_requires_new_registration(
        self, mock_ansible_module, mock_client, registration_params
    ):
        registration_params["event_notifications_instance_crn"] = EN_CRN.replace("5678", "9999")
        mock_ansible_module.params = registration_params
        mock_client.send_request.return_value = (REGISTRATION, 200)

        make_runner(mock_ansible_module, mock_client).run()

        msg = mock_ansible_module.fail_json.call_args.kwargs["msg"]
        assert "event_notifications_instance_crn" in msg

    def test_unregister(self, mock_ansible_module, mock_client, registration_params):
        registration_params["state"] = "absent"
        mock_ansible_module.params = registration_params
        mock_client.send_request.side_effect = [(REGISTRATION, 200), (None, 204)]

        make_runner(mock_ansible_module, mock_client).run()

        delete_call = mock_client.send_request.call_args_list[1]
        assert delete_call.args == ("DELETE", "/api/v1/notifications/registration")
        assert delete_call.kwargs["path_params"] is None
        assert mock_ansible_module.exit_json.call_args.kwargs["changed"] is True
