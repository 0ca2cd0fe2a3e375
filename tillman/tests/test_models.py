"""Tests for Tillman models and admin registration."""

import pytest
from django.contrib import admin
from django.db import IntegrityError

from tillman.models import LedgerAccount, LedgerEntry, OutboxEntry
from tillman.services.ledger import LedgerService


pytestmark = pytest.mark.django_db


class TestLedgerModels:
    """Tests for ledger model constraints."""

    def test_balance_cannot_be_negative(self):
        """Test database rejects a negative balance."""
        with pytest.raises(IntegrityError):
            LedgerAccount.objects.create(customer_ref="CUST-001", store_ref="store-1", balance=-1)

    def test_one_account_per_customer_and_store(self):
        """Test one account per customer and store."""
        LedgerAccount.objects.create(customer_ref="CUST-001", store_ref="store-1")
        with pytest.raises(IntegrityError):
            LedgerAccount.objects.create(customer_ref="CUST-001", store_ref="store-1")

    def test_str(self):
        """Test string representations."""
        entry = LedgerService.apply("CUST-001", "store-1", 10, "sale-1")
        assert str(entry) == "+10pts — sale-1"
        assert "CUST-001" in str(entry.account)


class TestAdmin:
    """Tests for admin registration."""

    @pytest.mark.parametrize("model", [LedgerAccount, LedgerEntry, OutboxEntry])
    def test_registered(self, model):
        """Test model is registered in the admin."""
        assert admin.site.is_registered(model)

    def test_ledger_is_read_only(self, rf):
        """Test ledger entries are read-only in the admin."""
        model_admin = admin.site._registry[LedgerEntry]
        request = rf.get("/")
        assert model_admin.has_add_permission(request) is False
        assert model_admin.has_change_permission(request) is False
