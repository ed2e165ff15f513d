"""The résumé profile: a single persisted record replaced wholesale on change."""
from __future__ import annotations

from typing import TYPE_CHECKING

from jobhunt import store as kv
from jobhunt.log import get_logger
from jobhunt.models import UserProfile

if TYPE_CHECKING:
    from jobhunt.ai import AIClient

log = get_logger(__name__)


class ProfileManager:
    def __init__(self, store: kv.KeyValueStore) -> None:
        self.store = store
        self.profile = UserProfile()

    @property
    def resume_text(self) -> str:
        return self.profile.resume_text

    def load(self) -> UserProfile:
        self.profile = kv.load(self.store, kv.PROFILE_KEY, UserProfile, UserProfile.from_dict)
        log.info("Loaded profile (%d chars of résumé text)", len(self.profile.resume_text))
        return self.profile

    def replace(self, profile: UserProfile) -> None:
        self.profile = profile
        kv.save(self.store, kv.PROFILE_KEY, profile.to_dict())

    def save_text(self, text: str) -> UserProfile:
        self.replace(UserProfile(resume_text=text))
        log.info("Profile saved (%d chars)", len(text))
        return self.profile

    async def upload_pdf(self, data: bytes, ai: AIClient) -> UserProfile:
        """Replace the résumé with text extracted from a PDF.

        ExtractionError propagates and the current profile is kept.
        """
        text = await ai.extract_resume_text(data)
        return self.save_text(text)
