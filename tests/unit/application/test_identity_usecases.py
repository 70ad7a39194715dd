"""Unit tests for the identity linking use cases."""

from dishka import AsyncContainer
import pytest

from tether.application.usecase.auth.login import LoginRequest, LoginUseCase
from tether.application.usecase.identity.get_history import (
    GetHistoryRequest,
    GetHistoryUseCase,
)
from tether.application.usecase.identity.get_linking_status import (
    GetLinkingStatusRequest,
    GetLinkingStatusUseCase,
)
from tether.application.usecase.identity.link_provider import (
    LinkProviderRequest,
    LinkProviderUseCase,
)
from tether.application.usecase.identity.record_creative_upload import (
    RecordCreativeUploadRequest,
    RecordCreativeUploadUseCase,
)
from tether.application.usecase.identity.unlink_provider import (
    UnlinkProviderRequest,
    UnlinkProviderUseCase,
)
from tether.domain.value import (
    LinkErrorKind,
    LinkFailure,
    LinkingAction,
    ProviderKind,
    Role,
)
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def _identity_id(container: AsyncContainer, credential: str = "g-1") -> str:
    login = await container.get(LoginUseCase)
    session = await login.execute(
        LoginRequest(provider=ProviderKind.GOOGLE, credential=credential)
    )
    return session.identity.identity_id


class TestLinkAndUnlink:
    """Tests for LinkProviderUseCase and UnlinkProviderUseCase."""

    @pytest.mark.asyncio
    async def test_link_then_unlink(self, unit_env: AsyncContainer):
        # Arrange
        identity_id = await _identity_id(unit_env)
        link = await unit_env.get(LinkProviderUseCase)
        unlink = await unit_env.get(UnlinkProviderUseCase)
        status = await unit_env.get(GetLinkingStatusUseCase)

        # Act
        linked = await link.execute(
            LinkProviderRequest(
                identity_id=identity_id,
                provider=ProviderKind.FACEBOOK,
                credential="f-1",
            )
        )
        linked_status = await status.execute(
            GetLinkingStatusRequest(identity_id=identity_id)
        )
        unlinked = await unlink.execute(
            UnlinkProviderRequest(identity_id=identity_id, provider=ProviderKind.FACEBOOK)
        )

        # Assert
        assert linked.role_changed is False
        assert linked_status.is_linked is True
        assert linked_status.providers == [ProviderKind.GOOGLE, ProviderKind.FACEBOOK]
        assert [p.provider for p in unlinked.identity.providers] == [
            ProviderKind.GOOGLE
        ]

    @pytest.mark.asyncio
    async def test_link_account_owned_elsewhere(self, unit_env: AsyncContainer):
        # Arrange
        other_id = await _identity_id(unit_env, "g-2")
        identity_id = await _identity_id(unit_env)
        link = await unit_env.get(LinkProviderUseCase)
        await link.execute(
            LinkProviderRequest(
                identity_id=other_id, provider=ProviderKind.META, credential="m-1"
            )
        )

        # Act
        response = await link.execute(
            LinkProviderRequest(
                identity_id=identity_id, provider=ProviderKind.META, credential="m-1"
            )
        )

        # Assert
        assert isinstance(response, LinkFailure)
        assert response.kind == LinkErrorKind.ACCOUNT_ALREADY_LINKED
        assert "different account" in response.user_message

    @pytest.mark.asyncio
    async def test_unlink_primary_refused(self, unit_env: AsyncContainer):
        identity_id = await _identity_id(unit_env)
        unlink = await unit_env.get(UnlinkProviderUseCase)

        response = await unlink.execute(
            UnlinkProviderRequest(identity_id=identity_id, provider=ProviderKind.GOOGLE)
        )

        assert response.kind == LinkErrorKind.UNLINK_NOT_ALLOWED


class TestCreativeUploadAndHistory:
    """Tests for RecordCreativeUploadUseCase and GetHistoryUseCase."""

    @pytest.mark.asyncio
    async def test_upload_promotes_and_is_recorded(self, unit_env: AsyncContainer):
        # Arrange
        identity_id = await _identity_id(unit_env)
        upload = await unit_env.get(RecordCreativeUploadUseCase)
        history = await unit_env.get(GetHistoryUseCase)

        # Act
        first = await upload.execute(RecordCreativeUploadRequest(identity_id=identity_id))
        second = await upload.execute(
            RecordCreativeUploadRequest(identity_id=identity_id)
        )
        events = await history.execute(GetHistoryRequest(identity_id=identity_id))

        # Assert
        assert first.promoted is True
        assert first.previous_role == Role.GUEST
        assert first.role == Role.ARTIST
        assert second.promoted is False
        assert [e.action for e in events.events] == [
            LinkingAction.PROMOTED,
            LinkingAction.CREATED,
        ]
