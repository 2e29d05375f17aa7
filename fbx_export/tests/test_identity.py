"""
Tests for ExportIdentity defaults resolution.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from fbx_export.identity import ExportIdentity, HostDefaults


HOST = HostDefaults(company_name="Company", product_name="Product", version="1.0")


def test_resolve_fills_only_unset_fields():
    identity = ExportIdentity(vendor="Vendor", version="")

    resolved = identity.resolve(HOST)

    assert resolved == ExportIdentity(
        vendor="Vendor",
        creator_name="Product",
        application_name="Product",
        version="1.0",
    )
    assert identity.creator_name is None


def test_resolve_does_not_leak_between_calls():
    ExportIdentity().resolve(HOST)

    resolved = ExportIdentity().resolve(HostDefaults(company_name="Other"))

    assert resolved.vendor == "Other"
    assert resolved.creator_name == ""


def test_from_mapping_ignores_unknown_keys():
    identity = ExportIdentity.from_mapping({"vendor": "V", "creator_name": None, "colour": "red"})

    assert identity == ExportIdentity(vendor="V")


def test_from_mapping_rejects_non_strings():
    with pytest.raises(ValueError):
        ExportIdentity.from_mapping({"version": 2})
