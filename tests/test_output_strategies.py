"""Tests for output strategies."""
import json
from io import StringIO

import pytest
from rich.console import Console

from fleet_host_filters.cli.context import CliContext
from fleet_host_filters.cli.notifications import ERROR, SUCCESS, FlashNotifier
from fleet_host_filters.cli.output_strategies import (
    JsonOutputStrategy,
    OutputStrategy,
    TextOutputStrategy,
    get_output_strategy,
)


@pytest.fixture
def text_context():
    """Create a CLI context printing to a buffer."""
    return CliContext(console=Console(file=StringIO(), force_terminal=False, width=200))


@pytest.fixture
def hosts_result():
    """Sample result of the hosts command."""
    return {
        'command': 'hosts',
        'success': True,
        'location': '/hosts/manage?page=0&order_key=hostname&order_direction=asc&mdm_id=2',
        'query_params': {'page': 0, 'order_key': 'hostname', 'order_direction': 'asc', 'mdm_id': 2},
        'label_id': None,
        'active_label': None,
        'exclusive_filter': 'mdm',
        'hosts': [
            {'id': 1, 'hostname': 'mac-mini-1', 'status': 'online', 'team_name': 'Workstations',
             'os_version': 'macOS 14.4', 'primary_ip': '10.0.0.5'},
            {'id': 2, 'hostname': 'win-[2]', 'status': 'missing', 'team_name': None},
        ],
        'total': 2,
        'page': 0,
        'page_size': 50,
        'flashes': [],
    }


def _text(context):
    return context.console.file.getvalue()


class TestTextOutputStrategy:
    """Test Rich text output."""

    def test_hosts_table(self, text_context, hosts_result):
        TextOutputStrategy().output(hosts_result, text_context)

        output = _text(text_context)
        assert 'Hosts 1-2 of 2' in output
        assert 'mac-mini-1' in output
        assert 'win-[2]' in output
        assert 'No team' in output
        assert 'Filter: mdm' in output

    def test_no_hosts(self, text_context, hosts_result):
        hosts_result.update(hosts=[], total=0)

        TextOutputStrategy().output(hosts_result, text_context)

        assert 'No hosts match the current criteria' in _text(text_context)

    def test_failed_hosts_prints_nothing(self, text_context, hosts_result):
        hosts_result['success'] = False

        TextOutputStrategy().output(hosts_result, text_context)

        assert _text(text_context) == ''

    def test_count_with_eligibility(self, text_context):
        data = {
            'command': 'count', 'success': True, 'location': '/hosts/manage', 'exclusive_filter': None,
            'count': 12000, 'run_script': {'allowed': False, 'reason': 'Target at most 5,000 hosts to run a script'},
        }

        TextOutputStrategy().output(data, text_context)

        output = _text(text_context)
        assert '12,000' in output
        assert 'Target at most 5,000 hosts to run a script' in output

    def test_filter_change(self, text_context):
        data = {
            'command': 'filter', 'success': True,
            'previous_location': '/hosts/manage?policy_id=1&policy_response=failing',
            'location': '/hosts/manage?mdm_id=2', 'query_params': {'mdm_id': '2'},
            'exclusive_filters': ['mdm'], 'includes_filter': True,
        }

        TextOutputStrategy().output(data, text_context)

        output = _text(text_context)
        assert 'From:' in output
        assert '/hosts/manage?mdm_id=2' in output
        assert 'Exclusive filter: mdm' in output

    def test_profile_explain(self, text_context):
        data = {
            'command': 'profile', 'success': True,
            'message': {'message': 'Go to OS updates.', 'text': 'Go to OS updates.',
                        'emphasis': 'OS updates', 'learn_more_url': None},
        }

        TextOutputStrategy().output(data, text_context)

        assert 'Go to OS updates.' in _text(text_context)

    def test_profile_check(self, text_context):
        data = {
            'command': 'profile', 'success': False,
            'profiles': [
                {'file': 'a.xml', 'name': 'a', 'platform': 'Windows'},
                {'file': 'b.txt', 'error': 'Invalid file type: txt'},
            ],
        }

        TextOutputStrategy().output(data, text_context)

        output = _text(text_context)
        assert 'Windows' in output
        assert 'Invalid file type: txt' in output


class TestJsonOutputStrategy:
    """Test JSON output."""

    def test_json_output(self, text_context, hosts_result, capsys):
        JsonOutputStrategy().output(hosts_result, text_context)

        output = json.loads(capsys.readouterr().out)
        assert output['total'] == 2
        assert output['exclusive_filter'] == 'mdm'


class TestFlashNotifier:
    """Test flash collection and printing."""

    def test_text_mode_prints(self, text_context):
        notifier = FlashNotifier(text_context)

        notifier.render_flash(SUCCESS, "Host(s) successfully deleted.")
        notifier.render_flash(ERROR, "Could not delete host(s). Please try again.")

        assert 'Host(s) successfully deleted.' in _text(text_context)
        assert notifier.to_list() == [
            {'type': 'success', 'message': 'Host(s) successfully deleted.'},
            {'type': 'error', 'message': 'Could not delete host(s). Please try again.'},
        ]

    def test_json_mode_only_collects(self, text_context):
        text_context.json_output_mode = True
        notifier = FlashNotifier(text_context)

        notifier.render_flash(SUCCESS, "done")

        assert _text(text_context) == ''
        assert notifier.to_list() == [{'type': 'success', 'message': 'done'}]


class TestGetOutputStrategy:
    """Test the strategy factory."""

    @pytest.mark.parametrize("format_type,expected", [
        ('text', TextOutputStrategy),
        ('json', JsonOutputStrategy),
        ('csv', TextOutputStrategy),
    ])
    def test_factory(self, format_type, expected):
        strategy = get_output_strategy(format_type)

        assert isinstance(strategy, expected)
        assert isinstance(strategy, OutputStrategy)
