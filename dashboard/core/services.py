"""
Generic record service: one CRUD operation -> one tenant API call -> one Result.
"""
import logging

from .envelope import Result, extract_message, unwrap, unwrap_record
from .exceptions import RequestError

logger = logging.getLogger(__name__)


class RecordService:
    """CRUD calls for one Resource, optionally scoped (e.g. to a branch)"""

    def __init__(self, resource, client, scope=None):
        self.resource = resource
        self.client = client
        self.scope = scope

    def _fail(self, action, error):
        logger.warning(f"{self.resource.name}: {action} failed: {error}")
        return Result.fail(error.message or f"{action.capitalize()} {self.resource.name} failed")

    def _record(self, body, index=0):
        raw = unwrap_record(body)
        if raw is None:
            return None
        return self.resource.to_record(raw, index)

    def list(self, filters=None):
        params = self.resource.list_params(self.scope)
        params.update({k: v for k, v in (filters or {}).items() if v not in (None, '', 'all')})
        try:
            body = self.client.get(self.resource.get_list_path(self.scope), params=params)
        except RequestError as e:
            return self._fail('list', e)
        raws = unwrap(body, many=True)
        records = [self.resource.to_record(raw, index) for index, raw in enumerate(raws)]
        return Result.ok(records, extract_message(body))

    def get(self, record_id):
        try:
            body = self.client.get(self.resource.get_detail_path(record_id, self.scope))
        except RequestError as e:
            return self._fail('get', e)
        record = self._record(body)
        if record is None:
            return Result.fail(f"{self.resource.name} {record_id} not found")
        return Result.ok(record, extract_message(body))

    def create(self, payload):
        body_out = self.resource.to_payload(payload, self.scope)
        try:
            body = self.client.post(self.resource.path, body_out)
        except RequestError as e:
            return self._fail('create', e)
        self.resource.after_write(self.client, self.scope)
        return Result.ok(self._record(body), extract_message(body, 'Created successfully!'))

    def update(self, record_id, payload, partial=False):
        body_out = self.resource.to_payload(payload, self.scope)
        path = self.resource.get_detail_path(record_id, self.scope)
        try:
            body = self.client.patch(path, body_out) if partial else self.client.put(path, body_out)
        except RequestError as e:
            return self._fail('update', e)
        self.resource.after_write(self.client, self.scope)
        return Result.ok(self._record(body), extract_message(body, 'Updated successfully!'))

    def delete(self, record_id):
        try:
            body = self.client.delete(self.resource.get_detail_path(record_id, self.scope))
        except RequestError as e:
            return self._fail('delete', e)
        self.resource.after_write(self.client, self.scope)
        return Result.ok(None, extract_message(body, 'Deleted successfully!'))
