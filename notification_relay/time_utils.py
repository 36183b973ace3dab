from datetime import datetime

TIMESTAMP_FIELDS = ['timestamp', 'lastUpdated']


def convert_timestamps(data):
    """Firestore timestamps come back as datetimes; anything else is treated as unresolved"""
    for field in TIMESTAMP_FIELDS:
        if field in data and not isinstance(data[field], datetime):
            data[field] = None
    return data
