"""User preferences."""

from collections.abc import AsyncIterator

from .base import PreferenceLocalDataSource


class PreferenceRepository:
    """Preferences exposed to screen models.

    Hides which local data source stores them.
    """

    def __init__(self, preference_local_data_source: PreferenceLocalDataSource):
        self._data_source = preference_local_data_source

    def welcome_shown(self) -> AsyncIterator[bool]:
        """Stream whether the welcome message was already shown."""
        return self._data_source.welcome_shown()

    async def set_welcome_shown(self) -> None:
        """Remember that the welcome message was shown."""
        await self._data_source.set_welcome_shown()
