"""
Business logic services.

Each service handles one part of the import pipeline.
"""

from services.record_service import RecordService, get_record_service
from services.storage_service import StorageService, get_storage_service
from services.http_fetcher import HttpFetcher, get_http_fetcher
from services.asset_fetcher import AssetFetcher
from services.datasheet_deduplicator import DatasheetDeduplicator
from services.record_importer import RecordImporter
from services.auth_service import ImportAuthorizer
from services.import_service import ImportService, get_import_service

__all__ = [
    "RecordService",
    "get_record_service",
    "StorageService",
    "get_storage_service",
    "HttpFetcher",
    "get_http_fetcher",
    "AssetFetcher",
    "DatasheetDeduplicator",
    "RecordImporter",
    "ImportAuthorizer",
    "ImportService",
    "get_import_service",
]
