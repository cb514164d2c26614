"""
Management state for one resource list.

Holds the loaded records, the search term and filter values, the selection
used for bulk actions and the create/edit modal, and runs CRUD actions
through a RecordService. Failures never raise: they become error toasts and
leave the state as it was (modal stays open, items unchanged).

The state is plain JSON so views can keep it in the Django session between
requests (see dashboard.core.utils).
"""
import logging

from .envelope import Result
from .filtering import IDENTITY_VALUES, distinct_values, filter_records

logger = logging.getLogger(__name__)

# Modal states: closed -> creating | editing -> closed
CLOSED = 'closed'
CREATING = 'creating'
EDITING = 'editing'

SUCCESS = 'success'
ERROR = 'error'


def _plural(count, word='item'):
    return f"{count} {word}{'s' if count != 1 else ''}"


class RecordManager:

    def __init__(self, resource, service, state=None):
        self.resource = resource
        self.service = service
        self.items = []
        self.loaded = False
        self.loading = False
        self.action_loading = False
        self.search_term = ''
        self.filters = {name: '' for name in resource.filter_choices}
        self.selected_ids = set()
        self.modal_mode = CLOSED
        self.editing_id = None
        self.toasts = []
        if state:
            self._apply_state(state)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _apply_state(self, state):
        self.items = list(state.get('items') or [])
        self.loaded = bool(state.get('loaded'))
        self.search_term = state.get('search_term') or ''
        for name, value in (state.get('filters') or {}).items():
            if name in self.filters:
                self.filters[name] = value
        known = {item.get('id') for item in self.items}
        self.selected_ids = {i for i in state.get('selected_ids') or [] if i in known}
        self.modal_mode = state.get('modal_mode') or CLOSED
        self.editing_id = state.get('editing_id')
        if self.modal_mode == EDITING and self.find(self.editing_id) is None:
            self.close_modal()

    def to_state(self):
        return {
            'items': self.items,
            'loaded': self.loaded,
            'search_term': self.search_term,
            'filters': dict(self.filters),
            'selected_ids': self._ordered_selection(),
            'modal_mode': self.modal_mode,
            'editing_id': self.editing_id,
        }

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def filtered_items(self):
        return filter_records(self.items, self.search_term, self.resource.search_fields, self.filters)

    @property
    def all_selected(self):
        visible = [item['id'] for item in self.filtered_items]
        return bool(visible) and all(i in self.selected_ids for i in visible)

    @property
    def editing(self):
        if self.modal_mode != EDITING:
            return None
        return self.find(self.editing_id)

    @property
    def modal(self):
        return {
            'open': self.modal_mode != CLOSED,
            'mode': self.modal_mode,
            'editing': self.editing,
        }

    def find(self, record_id):
        if record_id is None:
            return None
        for item in self.items:
            if item.get('id') == str(record_id):
                return item
        return None

    def _ordered_selection(self):
        return [item['id'] for item in self.items if item.get('id') in self.selected_ids]

    def _remote_call(self, record_id, call):
        """Run call(backend id); records with no backend object yet fail without a request"""
        record = self.find(record_id)
        remote_id = record_id if record is None else self.resource.remote_id(record)
        if remote_id is None:
            return Result.fail(f"{self.resource.label or self.resource.name} {record_id} is not saved yet")
        return call(remote_id)

    def filter_options(self):
        options = {}
        for name, choices in self.resource.filter_choices.items():
            options[name] = list(choices) if choices is not None else distinct_values(self.items, name)
        return options

    # ------------------------------------------------------------------
    # Search / filters
    # ------------------------------------------------------------------

    def set_search_term(self, term):
        self.search_term = term or ''

    def set_filter(self, name, value):
        if name not in self.resource.filter_choices:
            raise ValueError(f"Unknown filter '{name}' for {self.resource.name}")
        choices = self.resource.filter_choices[name]
        if value not in IDENTITY_VALUES and choices is not None and value not in choices:
            raise ValueError(f"Invalid value '{value}' for filter '{name}'; expected one of {', '.join(choices)}")
        self.filters[name] = value or ''

    def reset_filters(self):
        self.search_term = ''
        self.filters = {name: '' for name in self.resource.filter_choices}

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, record_id, checked=True):
        record = self.find(record_id)
        if record is None:
            raise ValueError(f"Unknown {self.resource.name} id: {record_id}")
        if checked:
            self.selected_ids.add(record['id'])
        else:
            self.selected_ids.discard(record['id'])

    def select_all(self, checked=True):
        """Select every visible (filtered) row, or clear the selection"""
        if checked:
            self.selected_ids = {item['id'] for item in self.filtered_items}
        else:
            self.selected_ids = set()

    def clear_selection(self):
        self.selected_ids = set()

    # ------------------------------------------------------------------
    # Modal
    # ------------------------------------------------------------------

    def open_create(self):
        # Creating is disabled while rows are selected for a bulk action
        if self.selected_ids:
            return False
        self.modal_mode = CREATING
        self.editing_id = None
        return True

    def open_edit(self, record_id):
        record = self.find(record_id)
        if record is None:
            raise ValueError(f"Unknown {self.resource.name} id: {record_id}")
        self.modal_mode = EDITING
        self.editing_id = record['id']
        return record

    def close_modal(self):
        self.modal_mode = CLOSED
        self.editing_id = None

    # ------------------------------------------------------------------
    # Toasts
    # ------------------------------------------------------------------

    def toast(self, level, message):
        self.toasts.append({'level': level, 'message': message})
        if level == ERROR:
            logger.warning(f"{self.resource.name}: {message}")
        else:
            logger.info(f"{self.resource.name}: {message}")

    def drain_toasts(self):
        toasts, self.toasts = self.toasts, []
        return toasts

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def load(self):
        self.loading = True
        try:
            result = self.service.list()
        finally:
            self.loading = False

        if result.success:
            self.items = result.data or []
            self.loaded = True
            known = {item.get('id') for item in self.items}
            self.selected_ids &= known
            if self.modal_mode == EDITING and self.editing_id not in known:
                self.close_modal()
        else:
            # Previous items stay on screen
            self.toast(ERROR, f"Failed to load {self.resource.label or self.resource.name}: {result.message}")
        return result

    def create(self, payload):
        self.action_loading = True
        try:
            result = self.service.create(payload)
        finally:
            self.action_loading = False

        if not result.success:
            self.toast(ERROR, result.message or 'Failed to create item. Please try again.')
            return result

        # Append only a returned record onto a loaded list; otherwise read the list back
        if self.resource.optimistic and result.data and self.loaded:
            record = dict(result.data)
            record['display_id'] = len(self.items) + 1
            self.items.append(record)
        else:
            self.load()
        self.close_modal()
        self.toast(SUCCESS, 'Item added successfully.')
        return result

    def update(self, record_id, payload, partial=False):
        current = self.find(record_id)
        self.action_loading = True
        try:
            result = self._remote_call(
                record_id, lambda remote_id: self.service.update(remote_id, payload, partial=partial))
        finally:
            self.action_loading = False

        if not result.success:
            self.toast(ERROR, result.message or 'Failed to update item. Please try again.')
            return result

        if self.resource.optimistic and current is not None:
            patched = dict(current)
            patched.update(result.data or payload)
            patched['id'] = current['id']
            patched['display_id'] = current.get('display_id')
            self.items = [patched if item is current else item for item in self.items]
        else:
            self.load()
        self.close_modal()
        self.toast(SUCCESS, 'Item updated successfully.')
        return result

    def delete(self, record_id):
        current = self.find(record_id)
        self.action_loading = True
        try:
            result = self._remote_call(record_id, self.service.delete)
        finally:
            self.action_loading = False

        if not result.success:
            self.toast(ERROR, result.message or 'Failed to delete item. Please try again.')
            return result

        if self.resource.optimistic and current is not None:
            self.items = [item for item in self.items if item is not current]
            self.selected_ids.discard(current['id'])
        else:
            self.load()
        if self.editing_id == str(record_id):
            self.close_modal()
        self.toast(SUCCESS, 'Item deleted successfully.')
        return result

    def perform(self, record_id, call, success_message, changes=None):
        """Run a backend action other than CRUD on one record (status change, PIN, restore, ...).

        call receives the backend id. When the action changes record fields,
        they are patched in place for optimistic resources and reloaded otherwise.
        """
        current = self.find(record_id)
        self.action_loading = True
        try:
            result = self._remote_call(record_id, call)
        finally:
            self.action_loading = False

        if not result.success:
            self.toast(ERROR, result.message or 'Action failed. Please try again.')
            return result

        if changes:
            if self.resource.optimistic and current is not None:
                current.update(changes)
            else:
                self.load()
        self.toast(SUCCESS, success_message)
        return result

    def delete_selected(self):
        """Delete every selected record one call at a time, then reload.

        There is no transaction: a failure partway leaves the backend as it is,
        and the reload shows what actually remains.
        """
        ids = self._ordered_selection()
        if not ids:
            return Result.fail('No items selected')

        self.action_loading = True
        failures = []
        try:
            for record_id in ids:
                result = self._remote_call(record_id, self.service.delete)
                if not result.success:
                    failures.append({'id': record_id, 'message': result.message})
        finally:
            self.action_loading = False

        self.load()
        self.clear_selection()

        deleted = len(ids) - len(failures)
        data = {'requested': len(ids), 'deleted': deleted, 'failed': failures}
        if failures:
            message = f"Failed to delete {len(failures)} of {_plural(len(ids))}."
            self.toast(ERROR, message)
            return Result(success=False, data=data, message=message)

        message = f"{_plural(deleted)} deleted successfully."
        self.toast(SUCCESS, message)
        return Result.ok(data, message)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def snapshot(self):
        visible = self.filtered_items
        return {
            'resource': self.resource.name,
            'items': visible,
            'total': len(self.items),
            'filtered_count': len(visible),
            'search_term': self.search_term,
            'filters': dict(self.filters),
            'filter_options': self.filter_options(),
            'selected_ids': self._ordered_selection(),
            'all_selected': self.all_selected,
            'modal': self.modal,
            'loaded': self.loaded,
            'summary': self.resource.summarize(self.items),
            'toasts': self.drain_toasts(),
        }
