"""Unit tests for the Tenant aggregate."""

import pytest

from iam.domain.aggregates import Tenant
from iam.domain.events import (
    TenantActivated,
    TenantCreated,
    TenantDeactivated,
    TenantSettingsUpdated,
)
from iam.ports.exceptions import ValidationFailedError


class TestTenantCreation:
    def test_create_records_event_and_default_settings(self):
        tenant = Tenant.create(name="Acme Corp", slug="acme")

        assert tenant.active is True
        assert tenant.settings["timezone"] == "UTC"
        [event] = tenant.collect_events()
        assert isinstance(event, TenantCreated)
        assert event.slug == "acme"

    @pytest.mark.parametrize("slug", ["Acme", "acme corp", "acme_corp", ""])
    def test_invalid_slugs_are_rejected(self, slug):
        with pytest.raises(ValidationFailedError) as exc_info:
            Tenant.create(name="Acme", slug=slug)

        assert "slug" in exc_info.value.errors

    def test_all_problems_are_reported_together(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            Tenant.create(
                name="",
                slug="Bad Slug",
                contact_email="nope",
                contact_phone="0" * 21,
            )

        assert set(exc_info.value.errors) == {
            "name",
            "slug",
            "contact_email",
            "contact_phone",
        }

    def test_each_tenant_gets_its_own_settings_dict(self):
        first = Tenant.create(name="A", slug="a")
        second = Tenant.create(name="B", slug="b")

        first.settings["timezone"] = "Europe/Oslo"

        assert second.settings["timezone"] == "UTC"


class TestTenantSettings:
    @pytest.fixture
    def tenant(self):
        tenant = Tenant.create(name="Acme", slug="acme")
        tenant.collect_events()
        return tenant

    def test_update_merges_and_records_before_after(self, tenant):
        tenant.update_settings({"timezone": "Europe/Oslo"})

        assert tenant.settings["timezone"] == "Europe/Oslo"
        assert tenant.settings["default_unit"] == "kg"
        [event] = tenant.collect_events()
        assert isinstance(event, TenantSettingsUpdated)
        assert event.before["timezone"] == "UTC"
        assert event.after["timezone"] == "Europe/Oslo"

    def test_unchanged_values_record_nothing(self, tenant):
        tenant.update_settings({"timezone": "UTC"})

        assert tenant.collect_events() == []

    def test_unknown_key_is_rejected_without_change(self, tenant):
        with pytest.raises(ValidationFailedError) as exc_info:
            tenant.update_settings({"theme": "dark"})

        assert exc_info.value.errors == {"theme": ["is not a known setting"]}
        assert "theme" not in tenant.settings

    def test_empty_value_is_rejected(self, tenant):
        with pytest.raises(ValidationFailedError):
            tenant.update_settings({"default_unit": ""})


class TestTenantStatus:
    @pytest.fixture
    def tenant(self):
        tenant = Tenant.create(name="Acme", slug="acme")
        tenant.collect_events()
        return tenant

    def test_deactivate_then_activate(self, tenant):
        tenant.deactivate()
        assert tenant.active is False

        tenant.activate()

        assert tenant.active is True
        events = tenant.collect_events()
        assert [type(e) for e in events] == [TenantDeactivated, TenantActivated]

    def test_repeated_deactivation_records_one_event(self, tenant):
        tenant.deactivate()
        tenant.deactivate()

        assert len(tenant.collect_events()) == 1

    def test_activating_an_active_tenant_is_a_noop(self, tenant):
        tenant.activate()

        assert tenant.collect_events() == []
