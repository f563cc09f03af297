"""Tests for the provider admin service layer.

Routes and the CLI are thin wrappers; the rules live here:
- unknown types are rejected before anything is stored
- partial updates only write fields that were sent
- deleting the default provider clears the default
"""

import pytest

from courier.errors import ApiError, ApiErrorCode, NotFoundError
from courier.schemas.providers import ProviderCreate, ProviderUpdate
from courier.services import provider_admin


def _create(store, **overrides):
    fields = {
        "type": "gemini",
        "name": "Gemini",
        "endpoint": "https://gen.example.com/v1beta/models/{model}:generateContent",
        "credential": "test-credential",
    }
    fields.update(overrides)
    return provider_admin.create_provider(store, ProviderCreate(**fields))


class TestCreate:
    def test_create_strips_and_defaults(self, provider_store):
        provider = _create(provider_store, name="  Gemini  ", model="  ")

        assert provider.name == "Gemini"
        assert provider.model is None
        assert provider.enabled is True
        assert provider.has_credential is True

    def test_unknown_type(self, provider_store):
        with pytest.raises(ApiError) as exc_info:
            _create(provider_store, type="palm")

        assert exc_info.value.code == ApiErrorCode.E_PROVIDER_TYPE_INVALID
        assert provider_store.list_all() == []


class TestUpdate:
    def test_explicit_null_leaves_required_field(self, provider_store):
        provider = _create(provider_store)

        updated = provider_admin.update_provider(
            provider_store, provider.id, ProviderUpdate(name=None, model="gemini-1.5-pro")
        )

        assert updated.name == "Gemini"
        assert updated.model == "gemini-1.5-pro"

    def test_blank_model_clears_override(self, provider_store):
        provider = _create(provider_store, model="gemini-1.5-pro")

        updated = provider_admin.update_provider(
            provider_store, provider.id, ProviderUpdate(model="   ")
        )

        assert updated.model is None
        assert provider_store.get(provider.id).model is None

    def test_credential_can_be_rotated(self, provider_store):
        provider = _create(provider_store)

        provider_admin.update_provider(
            provider_store, provider.id, ProviderUpdate(credential="rotated")
        )

        assert provider_store.get(provider.id).credential == "rotated"

    def test_set_enabled(self, provider_store):
        provider = _create(provider_store)

        disabled = provider_admin.set_provider_enabled(provider_store, provider.id, False)
        enabled = provider_admin.set_provider_enabled(provider_store, provider.id, True)

        assert disabled.enabled is False
        assert enabled.enabled is True

    def test_unknown_id(self, provider_store):
        with pytest.raises(NotFoundError) as exc_info:
            provider_admin.set_provider_enabled(provider_store, "nope", True)
        assert exc_info.value.code == ApiErrorCode.E_PROVIDER_NOT_FOUND


class TestDeleteAndDefault:
    def test_delete_default_clears_it(self, provider_store):
        provider = _create(provider_store)
        provider_admin.set_default_provider(provider_store, provider.id)

        provider_admin.delete_provider(provider_store, provider.id)

        assert provider_store.get_pipeline_config().default_provider is None

    def test_delete_other_keeps_default(self, provider_store):
        kept = _create(provider_store, name="kept")
        removed = _create(provider_store, name="removed")
        provider_admin.set_default_provider(provider_store, kept.id)

        provider_admin.delete_provider(provider_store, removed.id)

        assert provider_store.get_pipeline_config().default_provider == kept.id

    def test_delete_unknown(self, provider_store):
        with pytest.raises(NotFoundError):
            provider_admin.delete_provider(provider_store, "nope")

    def test_pipeline_config_reports_active(self, provider_store):
        provider = _create(provider_store)

        config = provider_admin.get_pipeline_config(provider_store)

        assert config.active_provider == provider.id
        assert config.default_provider is None
