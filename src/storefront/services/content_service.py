"""Site content managed from the admin console: announcements, FAQs, settings."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from storefront.domain.errors import ApiError, ValidationError
from storefront.domain.models import ActionResult, Announcement, Faq, SettingItem
from storefront.domain.normalize import announcement_from_api, faq_from_api, many, setting_from_api, to_bool, to_str


def _result(body: dict) -> ActionResult:
    return ActionResult(success=to_bool(body.get("success"), True), message=to_str(body.get("message")))


def _drop_none(fields: dict) -> dict:
    return {k: v for k, v in fields.items() if v is not None}


class AnnouncementService:
    def __init__(self, api, uploads=None):
        self.api = api
        self.uploads = uploads

    def list_admin(self) -> list[Announcement]:
        body = self.api.get("/admin/announcements", fallback_message="Failed to fetch announcements")
        return many(announcement_from_api, body.get("announcements"))

    def list_public(self) -> list[Announcement]:
        body = self.api.get("/public/announcements", fallback_message="Failed to fetch announcements")
        return many(announcement_from_api, body.get("announcements"))

    def create(self, title: str, content: str, image: Optional[str] = None, is_active: Optional[bool] = None) -> Announcement:
        if not (title or "").strip() or not (content or "").strip():
            raise ValidationError("Title and content are required.")
        body = self.api.post(
            "/admin/announcements",
            json=_drop_none({"title": title.strip(), "content": content, "image": image, "is_active": is_active}),
            fallback_message="Failed to create announcement",
        )
        return announcement_from_api(body.get("announcement") or body)

    def update(self, announcement_id: int, **changes) -> Announcement:
        allowed = {"title", "content", "image", "is_active"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown announcement fields: {', '.join(sorted(unknown))}")
        payload = _drop_none(changes)
        if not payload:
            raise ValidationError("Nothing to update.")
        body = self.api.put(
            f"/admin/announcements/{announcement_id}",
            json=payload,
            fallback_message="Failed to update announcement",
        )
        return announcement_from_api(body.get("announcement") or body)

    def delete(self, announcement_id: int) -> None:
        self.api.delete(f"/admin/announcements/{announcement_id}", fallback_message="Failed to delete announcement")

    def upload_image(self, path: Path | str) -> str:
        if self.uploads is None:
            raise ValidationError("Uploads are not configured.")
        body = self.uploads.upload_single("/uploads/announcement", path)
        url = (body.get("data") or {}).get("url")
        if not url:
            raise ApiError("Upload response did not include an image url.", payload=body)
        return url


class FaqService:
    def __init__(self, api):
        self.api = api

    def list_public(self) -> list[Faq]:
        body = self.api.get("/public/faqs", fallback_message="Failed to fetch FAQs")
        return many(faq_from_api, body.get("faqs"))

    # the backend has no admin listing; the admin screen reads the public one
    list_admin = list_public

    def create(self, question: str, answer: str, is_active: Optional[bool] = None) -> ActionResult:
        if not (question or "").strip() or not (answer or "").strip():
            raise ValidationError("Question and answer are required.")
        body = self.api.post(
            "/admin/faqs",
            json=_drop_none({"question": question.strip(), "answer": answer.strip(), "is_active": is_active}),
            fallback_message="Failed to create FAQ",
        )
        return _result(body)

    def update(
        self,
        faq_id: int,
        question: Optional[str] = None,
        answer: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> ActionResult:
        payload = _drop_none({"question": question, "answer": answer, "is_active": is_active})
        if not payload:
            raise ValidationError("Nothing to update.")
        return _result(self.api.put(f"/admin/faqs/{faq_id}", json=payload, fallback_message="Failed to update FAQ"))

    def delete(self, faq_id: int) -> ActionResult:
        return _result(self.api.delete(f"/admin/faqs/{faq_id}", fallback_message="Failed to delete FAQ"))


class SettingsService:
    def __init__(self, api):
        self.api = api

    def get_admin_settings(self) -> dict[str, list[SettingItem]]:
        """Settings grouped by section, e.g. ``{"general": [SettingItem(...), ...]}``."""
        body = self.api.get("/admin/settings", fallback_message="Failed to fetch settings")
        groups = body.get("settings") or {}
        return {
            group: [setting_from_api(key, item) for key, item in (items or {}).items()]
            for group, items in groups.items()
        }

    def update_admin_settings(self, settings: dict[str, Any]) -> ActionResult:
        if not settings:
            raise ValidationError("Nothing to update.")
        payload = {key: "" if value is None else str(value) for key, value in settings.items()}
        return _result(self.api.put("/admin/settings", json=payload, fallback_message="Failed to update settings"))

    def get_public_settings(self) -> dict[str, Any]:
        body = self.api.get("/public/settings", fallback_message="Failed to fetch settings")
        return dict(body.get("settings") or {})

    def get_resource_settings(self) -> dict[str, Any]:
        body = self.api.get("/resources/settings", fallback_message="Failed to fetch settings")
        return dict(body.get("settings") or {})
