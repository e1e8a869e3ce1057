import html

import bleach
from rest_framework import serializers


class CleanCharField(serializers.CharField):
    """CharField that strips all markup but keeps the text as typed.

    bleach escapes ``&`` and ``<`` in the remaining text; those are
    unescaped again because values are stored and returned as JSON.
    """

    def to_internal_value(self, data):
        cleaned = bleach.clean(super().to_internal_value(data), tags=set(), strip=True)
        text = html.unescape(cleaned)
        return text.strip() if self.trim_whitespace else text
