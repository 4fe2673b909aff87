import yaml

from .client import S3Client
from .models import DEFAULT_HOST, DEFAULT_REGION, DEFAULT_TIMEOUT

REQUIRED_KEYS = ('access_key', 'secret_key')

DEFAULTS = {
    'region': DEFAULT_REGION,
    'host': DEFAULT_HOST,
    'secure': False,
    'timeout': DEFAULT_TIMEOUT,
    'retry': False,
}


def load_config(profile: str, config_file: str = ".config.yaml") -> dict:
    """Load the configuration for a specific profile from the YAML file."""
    with open(config_file, "r") as f:
        full_config = yaml.safe_load(f) or {}

    if profile not in full_config:
        raise ValueError(f"Profile '{profile}' not found in {config_file}")

    conf = dict(DEFAULTS)
    conf.update(full_config[profile] or {})
    for key in REQUIRED_KEYS:
        if not conf.get(key):
            raise ValueError(f"Missing '{key}' in config for profile '{profile}'")
    return conf


def client_from_config(conf: dict) -> S3Client:
    return S3Client(
        access_key=conf['access_key'],
        secret_key=conf['secret_key'],
        region=conf.get('region'),
        host=conf.get('host'),
        secure=bool(conf.get('secure')),
        timeout=conf.get('timeout', DEFAULT_TIMEOUT),
        retry=bool(conf.get('retry')),
    )
