import pytest

from ansible_ibm_provider.errors import NotFound, RemoteError
from ansible_ibm_provider.helpers import SECRET_GROUP_COLLECTION_TYPE
from ansible_ibm_provider.resources.sm_secret_group import DEFINITION, SecretGroupRunner

GROUP = {
    "id": "d898bb90-82f6-4d61-b5cc-b079b66cfa76",
    "name": "payments-team",
    "description": "Secrets owned by the payments team.",
    "creation_date": "2024-03-01T10:00:00Z",
    "last_update_date": "2024-03-01T10:00:00Z",
    "type": SECRET_GROUP_COLLECTION_TYPE,
}


def envelope(*resources):
    return {
        "metadata": {"collection_type": SECRET_GROUP_COLLECTION_TYPE, "collection_total": len(resources)},
        "resources": list(resources),
    }


@pytest.fixture
def group_params():
    return {
        "api_url": "https://api.example.com",
        "iam_token": "test-token",
        "state": "present",
        "id": None,
        "name": "payments-team",
        "description": "Secrets owned by the payments team.",
    }


def make_runner(module, client):
    return SecretGroupRunner(module, DEFINITION.context, client)


class TestCrudRunner:
    """
    Test suite for the generic CRUD lifecycle, exercised through the secret
    group resource.
    """

    # --- Scenario 1: Create a new resource successfully ---
    def test_create_new_resource(self, mock_ansible_module, mock_client, group_params):
        mock_ansible_module.params = group_params
        mock_client.send_request.side_effect = [
            (envelope(), 200),  # Lookup by name
            (envelope(GROUP), 201),  # Create
            (GROUP, 200),  # Read back
        ]

        make_runner(mock_ansible_module, mock_client).run()

        mock_ansible_module.fail_json.assert_not_called()
        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is True
        assert kwargs["id"] == GROUP["id"]
        assert kwargs["resource"]["name"] == "payments-team"
        assert kwargs["resource"]["creation_date"] == "2024-03-01T10:00:00Z"

        create_call = mock_client.send_request.call_args_list[1]
        assert create_call.args == ("POST", "/api/v1/secret_groups")
        assert create_call.kwargs["data"] == {
            "metadata": {"collection_type": SECRET_GROUP_COLLECTION_TYPE, "collection_total": 1},
            "resources": [
                {"name": "payments-team", "description": "Secrets owned by the payments team."}
            ],
        }
        assert kwargs["commands"][0]["method"] == "POST"
        assert kwargs["commands"][0]["url"] == "https://api.example.com/api/v1/secret_groups"

    # --- Scenario 2: Resource already exists, no changes needed ---
    def test_resource_exists_no_change(self, mock_ansible_module, mock_client, group_params):
        mock_ansible_module.params = group_params
        mock_client.send_request.return_value = (envelope(GROUP), 200)

        make_runner(mock_ansible_module, mock_client).run()

        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is False
        assert kwargs["commands"] == []
        assert mock_client.send_request.call_count == 1

    # --- Scenario 3: Update the mutable fields that differ ---
    def test_update_sends_full_body(self, mock_ansible_module, mock_client, group_params):
        group_params["id"] = GROUP["id"]
        group_params["description"] = "Now owned by billing."
        mock_ansible_module.params = group_params
        updated = {**GROUP, "description": "Now owned by billing."}
        mock_client.send_request.side_effect = [
            (GROUP, 200),  # Read by id
            (envelope(updated), 200),  # Update
            (updated, 200),  # Read back
        ]

        make_runner(mock_ansible_module, mock_client).run()

        update_call = mock_client.send_request.call_args_list[1]
        assert update_call.args == ("PUT", "/api/v1/secret_groups/{id}")
        assert update_call.kwargs["path_params"] == {"id": GROUP["id"]}
        assert update_call.kwargs["data"]["resources"] == [
            {"name": "payments-team", "description": "Now owned by billing."}
        ]
        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is True
        assert kwargs["resource"]["description"] == "Now owned by billing."
        assert kwargs["commands"][0]["diff"] == {
            "updated_attributes": [
                {
                    "param": "description",
                    "old": "Secrets owned by the payments team.",
                    "new": "Now owned by billing.",
                }
            ]
        }

    # --- Scenario 4: Delete an existing resource ---
    def test_delete_existing_resource(self, mock_ansible_module, mock_client, group_params):
        group_params["state"] = "absent"
        mock_ansible_module.params = group_params
        mock_client.send_request.side_effect = [(envelope(GROUP), 200), (None, 204)]

        make_runner(mock_ansible_module, mock_client).run()

        delete_call = mock_client.send_request.call_args_list[1]
        assert delete_call.args == ("DELETE", "/api/v1/secret_groups/{id}")
        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is True
        assert kwargs["resource"] is None
        assert kwargs["id"] is None

    def test_delete_tolerates_not_found(self, mock_ansible_module, mock_client, group_params):
        group_params["state"] = "absent"
        mock_ansible_module.params = group_params
        mock_client.send_request.side_effect = [
            (envelope(GROUP), 200),
            NotFound("Delete secret group", GROUP["id"]),
        ]

        make_runner(mock_ansible_module, mock_client).run()

        mock_ansible_module.fail_json.assert_not_called()
        assert mock_ansible_module.exit_json.call_args.kwargs["changed"] is True

    # --- Scenario 5: Absent and missing is a no-op ---
    def test_absent_and_missing(self, mock_ansible_module, mock_client, group_params):
        group_params["state"] = "absent"
        mock_ansible_module.params = group_params
        mock_client.send_request.return_value = (envelope(), 200)

        make_runner(mock_ansible_module, mock_client).run()

        mock_ansible_module.exit_json.assert_called_once_with(
            changed=False, id=None, resource=None, commands=[]
        )

    def test_stale_identifier_is_treated_as_absent(self, mock_ansible_module, mock_client, group_params):
        group_params["id"] = "gone"
        group_params["state"] = "absent"
        mock_ansible_module.params = group_params
        mock_client.send_request.side_effect = NotFound("Read secret group", "gone")

        runner = make_runner(mock_ansible_module, mock_client)
        runner.run()

        assert runner.exists() is False
        mock_ansible_module.exit_json.assert_called_once_with(
            changed=False, id=None, resource=None, commands=[]
        )

    # --- Scenario 6: Check mode reports the plan without executing it ---
    def test_check_mode_create(self, mock_ansible_module, mock_client, group_params):
        mock_ansible_module.params = group_params
        mock_ansible_module.check_mode = True
        mock_client.send_request.return_value = (envelope(), 200)

        make_runner(mock_ansible_module, mock_client).run()

        assert mock_client.send_request.call_count == 1
        kwargs = mock_ansible_module.exit_json.call_args.kwargs
        assert kwargs["changed"] is True
        assert kwargs["commands"][0]["description"] == "Create secret group"
        assert kwargs["commands"][0]["diff"]["state"] == "Resource will be created."

    # --- Scenario 7: Remote failures are reported through fail_json ---
    def test_remote_error_fails_the_module(self, mock_ansible_module, mock_client, group_params):
        mock_ansible_module.params = group_params
        mock_client.send_request.side_effect = [
            (envelope(), 200),
            RemoteError("Create secret group", 409, "API Response: conflict"),
        ]

        make_runner(mock_ansible_module, mock_client).run()

        mock_ansible_module.exit_json.assert_not_called()
        msg = mock_ansible_module.fail_json.call_args.kwargs["msg"]
        assert "Create secret group failed" in msg
        assert "409" in msg

    def test_values_differ_ignores_list_order(self, mock_ansible_module, mock_client):
        runner = make_runner(mock_ansible_module, mock_client)
        assert not runner.values_differ(["a", "b"], ["b", "a"])
        assert not runner.values_differ([{"k": 1}], [{"k": 1}])
        assert runner.values_differ(["a"], ["a", "b"])
        assert runner.values_differ("x", None)
