import logging

import yaml

from fleet_host_filters.utils.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_STALE_TIME_SECONDS,
    MAX_SCRIPT_BATCH_TARGETS,
)


def _load_config_defaults(config):
    # Ensure we have a dict to work with
    if not isinstance(config, dict):
        config = {}

    # Fleet server connection placeholder defaults (keeps keys present)
    config.setdefault('fleet', {})
    fleet = config['fleet']
    fleet['base_url'] = fleet.get('base_url', '')
    fleet['api_token'] = fleet.get('api_token', '')
    fleet['prefix'] = fleet.get('prefix', 'FLEET_')
    fleet['timeout'] = fleet.get('timeout', 30)

    # License tier gates the premium-only filters
    config.setdefault('license', {})
    config['license']['premium'] = bool(config['license'].get('premium', True))

    config.setdefault('server_settings', {})
    config['server_settings']['scripts_disabled'] = bool(
        config['server_settings'].get('scripts_disabled', False))

    # Hosts list defaults
    config.setdefault('hosts', {})
    hosts = config['hosts']
    hosts['page_size'] = hosts.get('page_size', DEFAULT_PAGE_SIZE)
    hosts['stale_time'] = hosts.get('stale_time', DEFAULT_STALE_TIME_SECONDS)
    hosts['max_script_batch_targets'] = hosts.get('max_script_batch_targets', MAX_SCRIPT_BATCH_TARGETS)

    # Logging defaults
    config.setdefault('logging', {})
    log = config['logging']
    log['file'] = log.get('file', 'logs/app.log')
    log['level'] = log.get('level', 'INFO')

    return config


def read_config_from_yaml(config_file="config/config.yaml"):
    try:
        with open(config_file, 'r') as file:
            config = yaml.safe_load(file) or {}
    except (OSError, yaml.YAMLError) as e:
        logging.warning("Error reading App configuration from %s: %s", config_file, e)
        config = {}
    config = _load_config_defaults(config)
    return config
