"""
Resource definitions.

One Resource describes a remote collection (ingredients, categories, staff,
...): where it lives on the tenant API, how backend objects map to the flat
records the dashboard shows, which fields are searchable and which filters
exist. Domain apps subclass Resource and register an instance in their
AppConfig.ready().
"""
import logging

from django.conf import settings

from .exceptions import UnknownResource

logger = logging.getLogger(__name__)

ACTIVE = 'Active'
INACTIVE = 'Inactive'
ACTIVE_STATUSES = (ACTIVE, INACTIVE)

_registry = {}


def status_from_flag(is_active):
    return ACTIVE if is_active else INACTIVE


def flag_from_status(status):
    return status == ACTIVE


class Resource:
    name = None
    label = None
    path = None
    list_path = None
    search_fields = ('name',)
    # filter name -> allowed values, or None for free-form values
    filter_choices = {}
    serializer_class = None
    # True: patch/append the local list after a mutation; False: reload it
    optimistic = False
    # False: records are created by a dedicated endpoint and are never edited
    writable = True
    export_columns = ('display_id', 'name')
    list_limit = None
    scoped = False
    # record field -> backend field used when building request bodies
    payload_map = {}

    def get_list_path(self, scope=None):
        return self.list_path or self.path

    def get_detail_path(self, remote_id, scope=None):
        return f"{self.path}/{remote_id}"

    def record_id(self, raw):
        if not isinstance(raw, dict):
            return None
        value = raw.get('_id') or raw.get('id')
        return str(value) if value is not None else None

    def to_record(self, raw, index):
        """Backend object -> flat record with `id` (backend id) and `display_id` (UI number)"""
        if not isinstance(raw, dict):
            return {'value': raw, 'id': None, 'display_id': index + 1}
        record = dict(raw)
        for field, backend_field in self.payload_map.items():
            if backend_field in raw:
                record[field] = raw[backend_field]
        if 'status' not in self.payload_map and 'isActive' in raw:
            record['status'] = status_from_flag(raw['isActive'])
        record['id'] = self.record_id(raw)
        record['display_id'] = index + 1
        return record

    def to_payload(self, data, scope=None):
        """Validated serializer data -> request body for the tenant API.

        Only keys present in data are sent, so partial updates stay partial.
        """
        payload = {}
        for key, value in data.items():
            if key == 'status' and 'status' not in self.payload_map:
                payload['isActive'] = flag_from_status(value)
                continue
            payload[self.payload_map.get(key, key)] = value
        return payload

    def remote_id(self, record):
        return record.get('id')

    def list_params(self, scope=None):
        return {'limit': self.list_limit or settings.TENANT_API_LIST_LIMIT}

    def resolve_scope(self, client, scope):
        """Turn a URL scope (e.g. a branch code) into the backend identifier"""
        return scope

    def after_write(self, client, scope=None):
        """Called after a successful create, update or delete"""

    def summarize(self, records):
        counts = {}
        for record in records:
            status = record.get('status')
            if status:
                counts[status] = counts.get(status, 0) + 1
        return {'total': len(records), 'by_status': counts}

    def describe(self):
        return {
            'name': self.name,
            'label': self.label or self.name,
            'search_fields': list(self.search_fields),
            'filters': {
                k: list(v) if v is not None else None
                for k, v in self.filter_choices.items()
            },
            'optimistic': self.optimistic,
            'writable': self.writable,
            'scoped': self.scoped,
        }

    def __repr__(self):
        return f"<Resource {self.name} {self.path}>"


def register(resource):
    if not resource.name:
        raise ValueError(f"{resource.__class__.__name__} has no name")
    if resource.name in _registry:
        logger.debug(f"Replacing registered resource {resource.name}")
    _registry[resource.name] = resource
    return resource


def get_resource(name):
    try:
        return _registry[name]
    except KeyError:
        raise UnknownResource(f"Unknown resource: {name}")


def all_resources():
    return [_registry[name] for name in sorted(_registry)]
