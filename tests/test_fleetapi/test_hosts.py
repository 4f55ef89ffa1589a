"""
Tests for the Fleet API client and Hosts endpoints.

Tests cover: request params built from the filter state, label routing,
bulk transfer and delete payloads, and error handling.
"""
from unittest.mock import Mock

import pytest
import requests

from fleet_host_filters.fleetapi.client import FleetClient
from fleet_host_filters.fleetapi.hosts import (
    Hosts,
    build_count_query_params,
    build_filter_payload,
    build_hosts_query_params,
)
from fleet_host_filters.utils.exceptions import ApiConnectionError, ApiError, ValidationError
from fleet_host_filters.utils.models import FilterState


def _response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = body if body is not None else {}
    response.content = b'{}' if body is not None else b''
    response.text = ''
    return response


class TestFleetClient:
    """Test FleetClient request handling."""

    def test_headers_and_url(self):
        """Test bearer token header and URL joining."""
        session = Mock()
        session.headers = {}
        session.request.return_value = _response(body={'hosts': []})

        client = FleetClient('https://fleet.example.com/', 'token123', timeout=7, session=session)
        result = client.get('/api/latest/fleet/hosts', params={'page': 0})

        assert result == {'hosts': []}
        assert session.headers['Authorization'] == 'Bearer token123'
        session.request.assert_called_once_with(
            'get', 'https://fleet.example.com/api/latest/fleet/hosts',
            params={'page': 0}, json=None, timeout=7,
        )

    def test_error_reasons_raised(self):
        """Test non-2xx responses raise ApiError with the API reasons."""
        session = Mock()
        session.headers = {}
        session.request.return_value = _response(
            422, {'message': 'Validation Failed', 'errors': [{'name': 'base', 'reason': 'Bad profile'}]})
        client = FleetClient('https://fleet.example.com', 'token', session=session)

        with pytest.raises(ApiError) as exc_info:
            client.post('/api/latest/fleet/hosts/transfer', payload={'team_id': 1, 'hosts': [1]})

        assert exc_info.value.status_code == 422
        assert exc_info.value.reason == 'Bad profile'

    def test_connection_error(self):
        """Test network failures raise ApiConnectionError."""
        session = Mock()
        session.headers = {}
        session.request.side_effect = requests.ConnectionError("refused")
        client = FleetClient('https://fleet.example.com', 'token', session=session)

        with pytest.raises(ApiConnectionError, match="refused"):
            client.get('/api/latest/fleet/hosts')

    def test_empty_body(self):
        """Test an empty successful response decodes to an empty dict."""
        session = Mock()
        session.headers = {}
        session.request.return_value = _response(200)
        client = FleetClient('https://fleet.example.com', 'token', session=session)

        assert client.post('/api/latest/fleet/hosts/delete', payload={'ids': [1]}) == {}


class TestHostsQueryParams:
    """Test query params and payloads built from a filter state."""

    def test_hosts_params_use_priority_chain(self):
        """Test only the winning exclusive filter reaches the request."""
        state = FilterState(team_id=2, policy_id=1, policy_response='failing', software_id=3, page=1)

        params = build_hosts_query_params(state, page_size=25)

        assert params == {
            'page': 1, 'order_key': 'hostname', 'order_direction': 'asc', 'team_id': 2,
            'policy_id': 1, 'policy_response': 'failing', 'per_page': 25, 'device_mapping': 'true',
        }

    def test_count_params_drop_paging(self):
        """Test count params have no paging and carry the label."""
        state = FilterState(label_id=7, status='online', page=3)

        params = build_count_query_params(state)

        assert params == {'status': 'online', 'label_id': 7}

    def test_filter_payload(self):
        """Test bulk payload carries compatible and exclusive filters."""
        state = FilterState(team_id=0, query='mac', label_id=4, mdm_id=2)

        assert build_filter_payload(state) == {'query': 'mac', 'label_id': 4, 'team_id': 0, 'mdm_id': 2}

    def test_filter_payload_matches_list_filters(self):
        """Test inactive and outranked filters stay out of the bulk payload."""
        state = FilterState(team_id=1, policy_id=3, software_id=9)

        list_params = build_hosts_query_params(state)
        payload = build_filter_payload(state)

        assert payload == {'team_id': 1, 'software_id': 9}
        assert 'policy_id' not in list_params
        assert list_params['software_id'] == 9

    def test_filter_payload_keeps_only_winning_filter(self):
        state = FilterState(team_id=1, policy_id=3, policy_response='failing', mdm_id=2)

        assert build_filter_payload(state) == {'team_id': 1, 'policy_id': 3, 'policy_response': 'failing'}

    def test_filter_payload_free_tier_drops_premium_filters(self):
        state = FilterState(team_id=1, low_disk_space=32)

        assert build_filter_payload(state, premium_tier=False) == {'team_id': 1}

    def test_filter_payload_missing_status_outranked(self):
        state = FilterState(status='missing', policy_id=3, policy_response='passing')

        assert build_filter_payload(state) == {'policy_id': 3, 'policy_response': 'passing'}

    @pytest.mark.parametrize("values", [
        {'profile_status': 'failed', 'profile_uuid': 'abc'},
        {'script_batch_execution_status': 'errored', 'script_batch_execution_id': 'xyz'},
    ])
    def test_filter_payload_rejects_filters_without_bulk_field(self, values):
        """Test a bulk action never widens to the whole team."""
        with pytest.raises(ValidationError, match='--hosts'):
            build_filter_payload(FilterState(team_id=1, **values))


class TestHostsEndpoints:
    """Test Hosts endpoint routing."""

    def test_load_hosts(self, mock_client):
        """Test list hosts uses the hosts endpoint."""
        mock_client.get.return_value = {'hosts': [{'id': 1}]}
        hosts = Hosts(mock_client, page_size=10)

        result = hosts.load_hosts(FilterState(mdm_id=1))

        assert result == {'hosts': [{'id': 1}]}
        path = mock_client.get.call_args[0][0]
        assert path == '/api/latest/fleet/hosts'
        assert mock_client.get.call_args[1]['params']['mdm_id'] == 1

    def test_load_label_hosts(self, mock_client):
        """Test a label routes to the label hosts endpoint."""
        Hosts(mock_client).load_hosts(FilterState(label_id=7))

        assert mock_client.get.call_args[0][0] == '/api/latest/fleet/labels/7/hosts'

    def test_free_tier_drops_premium_filters(self, mock_client):
        """Test premium-only filters are not sent on the free tier."""
        Hosts(mock_client, premium_tier=False).load_hosts(FilterState(low_disk_space=32))

        assert 'low_disk_space' not in mock_client.get.call_args[1]['params']

    def test_count_hosts(self, mock_client):
        """Test count hosts returns the count."""
        mock_client.get.return_value = {'count': 42}

        assert Hosts(mock_client).count_hosts(FilterState()) == 42
        assert mock_client.get.call_args[0][0] == '/api/latest/fleet/hosts/count'

    def test_transfer_by_ids(self, mock_client):
        Hosts(mock_client).transfer_to_team(3, [1, 2])

        mock_client.post.assert_called_once_with(
            '/api/latest/fleet/hosts/transfer', payload={'team_id': 3, 'hosts': [1, 2]})

    def test_transfer_by_filter(self, mock_client):
        Hosts(mock_client).transfer_to_team_by_filter(None, FilterState(team_id=1, status='offline'))

        mock_client.post.assert_called_once_with(
            '/api/latest/fleet/hosts/transfer/filter',
            payload={'team_id': None, 'filters': {'status': 'offline', 'team_id': 1}})

    def test_delete(self, mock_client):
        hosts = Hosts(mock_client)

        hosts.destroy_bulk([5])
        hosts.destroy_by_filter(FilterState(query='old'))

        assert mock_client.post.call_args_list[0][1]['payload'] == {'ids': [5]}
        assert mock_client.post.call_args_list[1][1]['payload'] == {'filters': {'query': 'old'}}

    def test_delete_by_config_profile_filter_sends_nothing(self, mock_client):
        state = FilterState(team_id=1, profile_status='failed', profile_uuid='abc')

        with pytest.raises(ValidationError):
            Hosts(mock_client).destroy_by_filter(state)

        mock_client.post.assert_not_called()
