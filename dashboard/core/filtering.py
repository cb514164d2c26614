"""
Search and filter helpers for in-memory record lists.

filter_records is a pure function of (records, search term, filter values):
no hidden state, input order preserved.
"""

# Filter values that mean "no filter"
IDENTITY_VALUES = ('', 'all', None)


def _text(value):
    if value is None:
        return ''
    if isinstance(value, (list, tuple)):
        return ' '.join(str(v) for v in value)
    return str(value)


def matches_search(record, term, fields):
    """Case-insensitive substring match of term against any of the given fields"""
    q = (term or '').strip().lower()
    if not q:
        return True
    for field in fields:
        value = record.get(field)
        if value is None:
            continue
        if q in _text(value).lower():
            return True
    return False


def matches_filters(record, filters):
    """Exact match for every active filter; '', 'all' and None disable a filter"""
    for name, value in (filters or {}).items():
        if value in IDENTITY_VALUES:
            continue
        # Query-string values arrive as text, records may hold numbers
        if _text(record.get(name)) != _text(value):
            return False
    return True


def filter_records(records, search_term='', search_fields=(), filters=None):
    return [
        record for record in records
        if matches_search(record, search_term, search_fields) and matches_filters(record, filters)
    ]


def distinct_values(records, field):
    """Sorted unique non-empty values of a field, used for filter dropdowns"""
    values = {_text(r.get(field)) for r in records if r.get(field) not in (None, '')}
    return sorted(values)
