"""Models for the kvstore app.

KVEntry - one row per key; the value is an arbitrary JSON document
"""
from tortoise import fields, models

from config.settings import KV_TABLE


class KVEntry(models.Model):
    # key is the full store key, e.g. "resource:<id>"
    key = fields.CharField(pk=True, max_length=255)
    value = fields.JSONField()

    class Meta:
        table = KV_TABLE
