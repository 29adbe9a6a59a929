"""Tests for FogBugzClient command helpers."""

import os
from unittest.mock import MagicMock, patch

import pytest

from fogbugz_mcp.api.client import FogBugzClient
from fogbugz_mcp.config import FogBugzConfig
from fogbugz_mcp.errors import ConfigurationError, TransportError


class TestFogBugzClientInit:
    """Test client construction."""

    def test_requires_configuration(self):
        """Test a missing environment configuration is fatal."""
        with patch.dict(os.environ, {}, clear=True):
            with patch("fogbugz_mcp.config.load_dotenv"):
                with pytest.raises(ConfigurationError, match="FOGBUGZ_API_KEY"):
                    FogBugzClient()

    def test_retry_budget_from_config(self):
        """Test retry settings come from the configuration."""
        config = FogBugzConfig(
            base_url="https://x.fogbugz.com", api_key="k", max_retries=5, retry_delay=0.5
        )
        client = FogBugzClient(config, transport=MagicMock())
        assert client.max_retries == 5
        assert client.retry_delay == 0.5


class TestFogBugzClientCommands:
    """Test the command helpers against a mocked transport."""

    @pytest.fixture
    def transport(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def client(self, transport) -> FogBugzClient:
        config = FogBugzConfig(
            base_url="https://test.fogbugz.com", api_key="test-key", retry_delay=0.0
        )
        return FogBugzClient(config, transport=transport)

    def test_list_projects(self, client, transport):
        """Test listProjects is unwrapped to its records."""
        transport.send.return_value = {"projects": [{"ixProject": 1, "sProject": "A"}]}

        assert client.list_projects() == [{"ixProject": 1, "sProject": "A"}]
        transport.send.assert_called_once_with("listProjects", None, [])

    def test_list_areas_for_project(self, client, transport):
        """Test listAreas sends the project id."""
        transport.send.return_value = {"areas": []}

        client.list_areas(7)
        transport.send.assert_called_once_with("listAreas", {"ixProject": 7}, [])

    def test_list_milestones_uses_fixfors(self, client, transport):
        """Test milestones map to the listFixFors command."""
        transport.send.return_value = {"fixfors": [{"ixFixFor": 2}]}

        assert client.list_milestones(3) == [{"ixFixFor": 2}]
        transport.send.assert_called_once_with("listFixFors", {"ixProject": 3}, [])

    def test_list_statuses_for_category(self, client, transport):
        """Test listStatuses sends the category id when given."""
        transport.send.return_value = {"statuses": []}

        client.list_statuses(category_id=4)
        transport.send.assert_called_once_with("listStatuses", {"ixCategory": 4}, [])

    def test_view_current_person(self, client, transport):
        """Test viewPerson without an id asks for the token's owner."""
        transport.send.return_value = {"person": {"ixPerson": 1}}

        assert client.view_person() == {"ixPerson": 1}
        transport.send.assert_called_once_with("viewPerson", None, [])

    def test_missing_key_is_invalid_structure(self, client, transport):
        """Test a payload without the entity key raises TransportError."""
        transport.send.return_value = {"unexpected": []}

        with patch("time.sleep"):
            with pytest.raises(TransportError, match="Invalid response structure for listTags"):
                client.list_tags()

    def test_transport_errors_retried(self, client, transport):
        """Test transient transport failures are retried."""
        transport.send.side_effect = [
            TransportError(["timeout"]),
            {"priorities": [{"ixPriority": 1}]},
        ]

        with patch("time.sleep"):
            assert client.list_priorities() == [{"ixPriority": 1}]
        assert transport.send.call_count == 2

    def test_create_case_with_attachments(self, client, transport):
        """Test attachments are handed to the transport."""
        transport.send.return_value = {"case": {"ixBug": 123}}

        result = client.create_case({"sTitle": "Crash"}, ["/tmp/log.txt"])

        assert result == {"ixBug": 123}
        transport.send.assert_called_once_with("new", {"sTitle": "Crash"}, ["/tmp/log.txt"])

    def test_update_case_requires_ix_bug(self, client):
        """Test edit without a case id is rejected locally."""
        with pytest.raises(ValueError, match="ixBug"):
            client.update_case({"sTitle": "New title"})

    def test_assign_case(self, client, transport):
        """Test assign sends the case id and person name."""
        transport.send.return_value = {"case": {"ixBug": 9}}

        client.assign_case(9, "Jordan Lee")
        transport.send.assert_called_once_with(
            "assign", {"ixBug": 9, "sPersonAssignedTo": "Jordan Lee"}, []
        )

    def test_search_cases(self, client, transport):
        """Test search passes query, columns and max."""
        transport.send.return_value = {"cases": [{"ixBug": 1}]}

        client.search_cases("assignedto:me", cols="ixBug,sTitle", max_results=10)
        transport.send.assert_called_once_with(
            "search", {"q": "assignedto:me", "cols": "ixBug,sTitle", "max": 10}, []
        )

    def test_create_project_booleans_as_ints(self, client, transport):
        """Test boolean flags are sent as 1/0."""
        transport.send.return_value = {"project": {"ixProject": 4}}

        client.create_project("Website", primary_contact=2, inbox=True, allow_public_submit=False)
        transport.send.assert_called_once_with(
            "newProject",
            {
                "sProject": "Website",
                "ixPersonPrimaryContact": 2,
                "fInbox": 1,
                "fAllowPublicSubmit": 0,
            },
            [],
        )

    def test_get_case_link(self, client):
        """Test case links point at the installation's default.asp."""
        assert client.get_case_link(42) == "https://test.fogbugz.com/default.asp?42"

    def test_raw_request(self, client, transport):
        """Test the raw escape hatch returns the unwrapped payload."""
        transport.send.return_value = {"wikis": []}

        assert client.request("listWikis") == {"wikis": []}
