"""
Built-in compose service definitions.

Used when a ``templates/compose/*.yml`` file is missing from the installed
package. Values keep the same ``{{PLACEHOLDER}}`` tokens as the template
files so both go through the same substitution.
"""

from collections.abc import Callable
from typing import Any

import yaml


def _database_service(image: str, env_prefix: str, data_path: str) -> dict[str, Any]:
    environment = {
        f'{env_prefix}_DATABASE': '{{DB_NAME}}',
        f'{env_prefix}_USER': '{{DB_USER}}',
        f'{env_prefix}_PASSWORD': '{{DB_PASSWORD}}',
        f'{env_prefix}_ROOT_PASSWORD': '{{DB_ROOT_PASSWORD}}',
    }
    return {
        'image': image,
        'environment': environment,
        'ports': ['{{DB_PORT}}:3306'],
        'data': data_path,
    }


def get_mysql_service() -> dict[str, Any]:
    return _database_service('mysql:8.0', 'MYSQL', '/var/lib/mysql')


def get_mariadb_service() -> dict[str, Any]:
    return _database_service('mariadb:10.11', 'MARIADB', '/var/lib/mysql')


def get_postgres_service() -> dict[str, Any]:
    return {
        'image': 'postgres:15-alpine',
        'environment': {
            'POSTGRES_DB': '{{DB_NAME}}',
            'POSTGRES_USER': '{{DB_USER}}',
            'POSTGRES_PASSWORD': '{{DB_PASSWORD}}',
        },
        'ports': ['{{DB_PORT}}:5432'],
        'data': '/var/lib/postgresql/data',
    }


def get_redis_service() -> dict[str, Any]:
    return {
        'image': 'redis:7-alpine',
        'command': 'redis-server --requirepass {{REDIS_PASSWORD}}',
        'ports': ['{{REDIS_PORT}}:6379'],
        'data': '/data',
    }


def get_rabbitmq_service() -> dict[str, Any]:
    return {
        'image': 'rabbitmq:3-management-alpine',
        'environment': {
            'RABBITMQ_DEFAULT_USER': '{{RABBITMQ_USER}}',
            'RABBITMQ_DEFAULT_PASS': '{{RABBITMQ_PASSWORD}}',
            'RABBITMQ_DEFAULT_VHOST': '{{RABBITMQ_VHOST}}',
        },
        'ports': ['{{RABBITMQ_PORT}}:5672', '{{RABBITMQ_MANAGEMENT_PORT}}:15672'],
        'data': '/var/lib/rabbitmq',
    }


def get_meilisearch_service() -> dict[str, Any]:
    return {
        'image': 'getmeili/meilisearch:v1.5',
        'environment': {
            'MEILI_MASTER_KEY': '{{MEILISEARCH_MASTER_KEY}}',
            'MEILI_ENV': 'development',
        },
        'ports': ['{{MEILISEARCH_PORT}}:7700'],
        'data': '/meili_data',
    }


def get_elasticsearch_service() -> dict[str, Any]:
    return {
        'image': '{{ELASTICSEARCH_IMAGE}}',
        'environment': {
            'discovery.type': 'single-node',
            'ELASTIC_PASSWORD': '{{ELASTICSEARCH_PASSWORD}}',
            'ES_JAVA_OPTS': '-Xms512m -Xmx512m',
            'xpack.security.enabled': 'false',
        },
        'ports': ['{{ELASTICSEARCH_PORT}}:9200'],
        'data': '/usr/share/elasticsearch/data',
    }


def get_minio_service() -> dict[str, Any]:
    return {
        'image': 'minio/minio:latest',
        'command': 'server /data --console-address ":9001"',
        'environment': {
            'MINIO_ROOT_USER': '{{MINIO_ACCESS_KEY}}',
            'MINIO_ROOT_PASSWORD': '{{MINIO_SECRET_KEY}}',
        },
        'ports': ['{{MINIO_PORT}}:9000', '{{MINIO_CONSOLE_PORT}}:9001'],
        'data': '/data',
    }


BUILTIN_SERVICES: dict[str, Callable[[], dict[str, Any]]] = {
    'mysql.yml': get_mysql_service,
    'mariadb.yml': get_mariadb_service,
    'postgres.yml': get_postgres_service,
    'redis.yml': get_redis_service,
    'rabbitmq.yml': get_rabbitmq_service,
    'meilisearch.yml': get_meilisearch_service,
    'elasticsearch.yml': get_elasticsearch_service,
    'minio.yml': get_minio_service,
}


def inline_fragment(template_name: str) -> str | None:
    """Compose document for ``template_name``, or None if there is no built-in one."""
    factory = BUILTIN_SERVICES.get(template_name)
    if factory is None:
        return None

    name = template_name.removesuffix('.yml')
    service = factory()
    volume = '{{VOLUME_PREFIX}}-' + name + '-data'
    data_path = service.pop('data')
    service = {
        'container_name': '{{CONTAINER_PREFIX}}-' + name,
        'restart': 'unless-stopped',
        **service,
        'volumes': [f'{volume}:{data_path}'],
        'networks': ['{{NETWORK_NAME}}'],
    }
    document = {
        'services': {name: service},
        'volumes': {volume: {'driver': 'local'}},
        'networks': {'{{NETWORK_NAME}}': {'driver': 'bridge'}},
    }
    return yaml.dump(document, default_flow_style=False, sort_keys=False, indent=2)
