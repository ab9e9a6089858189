"""
OAuth module interfaces.

The Battle.net reconciler never renders anything; the host plugs in the
onboarding prompt through IOnboardingPrompt.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import LinkStatus


@runtime_checkable
class IOnboardingPrompt(Protocol):
    """Surfaces the post-link onboarding prompt (manual links only)."""

    def show(self, battle_tag: Optional[str]) -> None:
        """
        Show the prompt offering to import the linked account's characters.

        Args:
            battle_tag: The linked BattleTag, when the backend reported it
        """
        ...


@runtime_checkable
class IBattleNetLinkService(Protocol):
    """Interface for Battle.net account linking operations."""

    async def initiate_linking(self, auto_relink: bool = False) -> str:
        """
        Start the Battle.net OAuth flow.

        Args:
            auto_relink: The app started the flow itself to refresh a
                         stale link; the callback then syncs characters
                         without asking.

        Returns:
            The provider URL to send the browser to

        Raises:
            BattleNetError: If the backend refused to start the flow
        """
        ...

    async def get_link_status(self) -> LinkStatus:
        """
        Get whether a Battle.net account is linked.

        Raises:
            BattleNetError: If the status could not be read
        """
        ...

    async def unlink_account(self) -> None:
        """
        Remove the Battle.net link.

        Raises:
            BattleNetError: If the backend refused to unlink
        """
        ...
