"""Lookup: fetch and scrape per-module license pages."""

from find_license.lookup.client import LookupClient, licenses_url
from find_license.lookup.extract import LicenseFields, extract_license_fields

__all__ = ["LicenseFields", "LookupClient", "extract_license_fields", "licenses_url"]
