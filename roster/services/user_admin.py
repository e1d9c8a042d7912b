"""
User Administration Service.

The request handler behind the record-management page.  Turns a submitted
form (``action`` plus field values) into repository calls and maps the
outcome onto exactly one display message; builds the page state (listing,
edit target, statistics) for the view.

Architectural notes:
    - All database access goes through UserRepository.
    - Form field names follow the original page: ``nom``, ``prenom``,
      ``email``, ``telephone``, ``id``.
    - Operational failures never raise; they come back as a failed
      ``ServiceResult`` carrying a ``RecordErrorCode``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from pydantic import ValidationError

from roster.errors import StorageConnectionError
from roster.logger import StructuredLogger
from roster.models.enums import FormAction, MessageKind, RecordErrorCode
from roster.models.service_models import (
    FlashMessage,
    PageState,
    RepositoryResult,
    ServiceResult,
)
from roster.models.user import UserInput
from roster.repositories.user_repository import UserRepository
from roster.services.base_service import BaseService
from roster.utils.audit import log_audit_event

MSG_EMAIL_TAKEN: str = "Cet email est déjà utilisé !"
MSG_MISSING_FIELDS: str = "Champs obligatoires manquants !"
MSG_STORAGE_UNAVAILABLE: str = "Base de données indisponible !"

_SUCCESS_MESSAGES: dict[FormAction, str] = {
    FormAction.CREATE: "Utilisateur créé avec succès !",
    FormAction.UPDATE: "Utilisateur modifié avec succès !",
    FormAction.DELETE: "Utilisateur supprimé avec succès !",
}

_FAILURE_MESSAGES: dict[FormAction, str] = {
    FormAction.CREATE: "Erreur lors de la création !",
    FormAction.UPDATE: "Erreur lors de la modification !",
    FormAction.DELETE: "Erreur lors de la suppression !",
}

_STATUS_CODES: dict[RecordErrorCode, int] = {
    RecordErrorCode.VALIDATION_ERROR: 400,
    RecordErrorCode.NOT_FOUND: 404,
    RecordErrorCode.EMAIL_TAKEN: 409,
    RecordErrorCode.CONSTRAINT_VIOLATION: 409,
    RecordErrorCode.STORAGE_ERROR: 500,
    RecordErrorCode.CONNECTION_ERROR: 503,
}


def parse_id(raw: Optional[str]) -> Optional[int]:
    """Parse a record id from form/query input; ``None`` if it is not an integer."""
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


class UserAdminService(BaseService):
    """Service layer for the record-management page."""

    def __init__(
        self,
        repo: UserRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._repo = repo

    # ------------------------------------------------------------------
    # Form submissions
    # ------------------------------------------------------------------

    def handle(self, form: Mapping[str, str]) -> ServiceResult[FlashMessage]:
        """Dispatch one form submission on its ``action`` field.

        An absent or unknown action is a no-op: the result succeeds and
        carries no message.

        Returns:
            ``ServiceResult`` whose ``data`` is the message to display.
        """
        raw_action: str = (form.get("action") or "").strip()
        try:
            action = FormAction(raw_action)
        except ValueError:
            if raw_action:
                self._logger.warning("Ignoring unknown form action: %r", raw_action)
            return ServiceResult(success=True)

        try:
            if action is FormAction.CREATE:
                return self._create(form)
            if action is FormAction.UPDATE:
                return self._update(form)
            return self._delete(form)
        except StorageConnectionError as exc:
            self._logger.error("Storage unavailable during %s: %s", action, exc)
            return self._failure(
                action,
                RecordErrorCode.CONNECTION_ERROR,
                exc.message,
                text=MSG_STORAGE_UNAVAILABLE,
            )

    def _create(self, form: Mapping[str, str]) -> ServiceResult[FlashMessage]:
        data = self._parse_input(form)
        if data is None:
            return self._invalid(FormAction.CREATE)

        if self._repo.email_exists(data.email):
            return self._failure(
                FormAction.CREATE,
                RecordErrorCode.EMAIL_TAKEN,
                f"Email '{data.email}' is already in use.",
            )

        result = self._repo.create(data)
        if not result:
            return self._from_repository(FormAction.CREATE, result)

        log_audit_event(
            logger=self._logger,
            action="CREATE",
            entity_type="User",
            entity_id=result.data.id,
            details={"email": result.data.email},
        )
        return self._success(FormAction.CREATE)

    def _update(self, form: Mapping[str, str]) -> ServiceResult[FlashMessage]:
        user_id = parse_id(form.get("id"))
        data = self._parse_input(form)
        if user_id is None or data is None:
            return self._invalid(FormAction.UPDATE)

        if self._repo.email_exists(data.email, exclude_id=user_id):
            return self._failure(
                FormAction.UPDATE,
                RecordErrorCode.EMAIL_TAKEN,
                f"Email '{data.email}' is already in use.",
            )

        result = self._repo.update(user_id, data)
        if not result:
            return self._from_repository(FormAction.UPDATE, result)

        log_audit_event(
            logger=self._logger,
            action="UPDATE",
            entity_type="User",
            entity_id=user_id,
            details={"email": result.data.email},
        )
        return self._success(FormAction.UPDATE)

    def _delete(self, form: Mapping[str, str]) -> ServiceResult[FlashMessage]:
        user_id = parse_id(form.get("id"))
        if user_id is None:
            return self._invalid(FormAction.DELETE)

        result = self._repo.delete(user_id)
        if not result:
            return self._from_repository(FormAction.DELETE, result)

        log_audit_event(
            logger=self._logger,
            action="DELETE",
            entity_type="User",
            entity_id=user_id,
        )
        return self._success(FormAction.DELETE)

    # ------------------------------------------------------------------
    # Page state (read path)
    # ------------------------------------------------------------------

    def build_page(self, edit_id: Optional[str] = None) -> ServiceResult[PageState]:
        """Collect the listing, the optional edit target and the statistics.

        An *edit_id* that is malformed or matches no record simply yields
        no edit target.
        """
        try:
            users = self._repo.read_all()
            edit_user = None
            target = parse_id(edit_id)
            if target is not None:
                edit_user = self._repo.read_one(target)
                if edit_user is None:
                    self._logger.info("Edit target %s not found.", target)
            stats = self._repo.stats()
        except StorageConnectionError as exc:
            self._logger.error("Storage unavailable while building page: %s", exc)
            return ServiceResult(
                success=False,
                error=exc.message,
                error_code=RecordErrorCode.CONNECTION_ERROR,
                status_code=_STATUS_CODES[RecordErrorCode.CONNECTION_ERROR],
            )

        return ServiceResult(
            success=True,
            data=PageState(users=users, edit_user=edit_user, stats=stats),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _parse_input(self, form: Mapping[str, str]) -> Optional[UserInput]:
        try:
            return UserInput(
                first_name=form.get("prenom") or "",
                last_name=form.get("nom") or "",
                email=form.get("email") or "",
                phone=form.get("telephone"),
            )
        except ValidationError as exc:
            self._logger.info(
                "Rejected form input: %s", ", ".join(
                    str(err["loc"][0]) for err in exc.errors() if err.get("loc")
                ),
            )
            return None

    def _invalid(self, action: FormAction) -> ServiceResult[FlashMessage]:
        return self._failure(
            action,
            RecordErrorCode.VALIDATION_ERROR,
            "Missing or malformed form fields.",
            text=MSG_MISSING_FIELDS,
        )

    def _from_repository(
        self, action: FormAction, result: RepositoryResult,
    ) -> ServiceResult[FlashMessage]:
        code = result.error_code or RecordErrorCode.STORAGE_ERROR
        text = MSG_MISSING_FIELDS if code is RecordErrorCode.VALIDATION_ERROR else None
        return self._failure(action, code, result.error or "", text=text)

    @staticmethod
    def _success(action: FormAction) -> ServiceResult[FlashMessage]:
        return ServiceResult(
            success=True,
            data=FlashMessage(text=_SUCCESS_MESSAGES[action], kind=MessageKind.SUCCESS),
        )

    @staticmethod
    def _failure(
        action: FormAction,
        code: RecordErrorCode,
        error: str,
        text: Optional[str] = None,
    ) -> ServiceResult[FlashMessage]:
        if text is None:
            text = MSG_EMAIL_TAKEN if code is RecordErrorCode.EMAIL_TAKEN else _FAILURE_MESSAGES[action]
        return ServiceResult(
            success=False,
            data=FlashMessage(text=text, kind=MessageKind.ERROR),
            error=error,
            error_code=code,
            status_code=_STATUS_CODES[code],
        )
