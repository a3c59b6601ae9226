from __future__ import annotations

import logging
from typing import Callable

from cashier.core.config import settings
from cashier.core.errors import RecognitionError, ValidationError
from cashier.model.identity import (
    UNRESOLVED,
    BiometricMatch,
    Confirmed,
    ManualMatch,
    MergeType,
    Profile,
    ReconciliationIntent,
    Unresolved,
)
from cashier.model.session import Session
from cashier.services.cashier_api import ApiResult, CashierApi, Dispatcher

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Turns a manual search result and a face recognition result into one confirmed customer.

    Two candidate slots are kept side by side: `manual` (username search) and
    `biometric` (capture loop). They are only combined through an explicit
    `reconcile()`; otherwise `continue_with_best()` prefers the biometric
    match unless the operator flagged it as wrong.

    Backend results are applied in `on_done` callbacks. A result that arrives
    after `reset()` belongs to an abandoned identification and is dropped.
    """

    def __init__(self, session: Session, api: CashierApi, dispatch: Dispatcher,
                 on_change: Callable[[], None] | None = None):
        self.session = session
        self.api = api
        self.dispatch = dispatch
        self.on_change = on_change or (lambda: None)
        self._generation = 0
        self._clear()

    def _clear(self):
        self.manual: ManualMatch | Unresolved = UNRESOLVED
        self.biometric: BiometricMatch | Unresolved = UNRESOLVED
        self.confirmed: Confirmed | None = None
        self.intent = ReconciliationIntent.NONE
        self.error = ""
        self.merge_error = ""
        self.merge_status = ""
        self.searching = False
        self.merging = False

    def _guard(self, handler):
        """Wrap an on_done handler so it is ignored once the resolver was reset."""
        generation = self._generation

        def on_done(result: ApiResult):
            if generation != self._generation:
                logger.info("[Identify] dropping result of an abandoned identification")
                return
            handler(result)
            self.on_change()
        return on_done

    @property
    def has_candidate(self) -> bool:
        return not (isinstance(self.manual, Unresolved) and isinstance(self.biometric, Unresolved))

    @property
    def is_new(self) -> bool:
        return isinstance(self.biometric, BiometricMatch) and self.biometric.is_new

    @property
    def force_correction(self) -> bool:
        return self.intent is ReconciliationIntent.FORCE_CORRECTION

    @property
    def enrollment_url(self) -> str | None:
        """Registration link for a face the backend did not know yet."""
        if not self.is_new:
            return None
        base = settings.USER_APP_BASE_URL.rstrip("/")
        return f"{base}/register/?uid={self.biometric.profile.uid}"

    @property
    def pending_merge_type(self) -> MergeType | None:
        """Which reconciliation the current candidates call for, if any."""
        if isinstance(self.manual, Unresolved) or isinstance(self.biometric, Unresolved):
            return None
        if self.is_new:
            return MergeType.MERGE
        if self.force_correction:
            return MergeType.CORRECT
        return None

    # manual search
    def search(self, username: str):
        username = (username or "").strip()
        if not username:
            raise ValidationError("Please enter a username.")
        self.error = ""
        self.searching = True

        def on_found(result: ApiResult):
            self.searching = False
            if result.ok:
                self.manual = ManualMatch(Profile.model_validate(result.data))
                logger.info(f"[Identify] manual match uid={self.manual.profile.uid}")
            else:
                self.error = result.error_message("User not found.")
                logger.info(f"[Identify] search for '{username}' failed: {self.error}")

        token = self.session.token
        self.dispatch(lambda: self.api.fetch_user_profile(token, username), self._guard(on_found))

    # face recognition
    def receive_biometric(self, response: dict):
        """Take a recognition response: a known user, or an id-only "assumed new" record."""
        if not response or not response.get("uid"):
            raise RecognitionError("Face recognition returned no profile.")
        profile = Profile.model_validate(response)
        is_new = bool(profile.uid) and not profile.user_name
        self.biometric = BiometricMatch(profile, is_new=is_new)
        # a fresh signal invalidates any earlier correction
        self.intent = ReconciliationIntent.NONE
        self.confirmed = None
        self.merge_error = ""
        self.merge_status = ""
        logger.info(f"[Identify] biometric match uid={profile.uid} new={is_new}")
        self.on_change()

    def request_correction(self):
        """Operator says the recognised profile is somebody else."""
        if not isinstance(self.biometric, BiometricMatch):
            raise ValidationError("There is no recognised profile to correct.")
        if self.biometric.is_new:
            raise ValidationError("A new profile can only be merged, not corrected.")
        self.intent = ReconciliationIntent.FORCE_CORRECTION
        self.confirmed = None
        self.on_change()

    # reconciliation
    def reconcile(self, merge_type):
        try:
            merge_type = MergeType(merge_type)
        except ValueError:
            raise ValidationError("Unknown merge type.") from None
        if isinstance(self.biometric, Unresolved) or isinstance(self.manual, Unresolved):
            raise ValidationError("Both a recognised and a found profile are needed.")
        if self.merging:
            raise ValidationError("A merge is already in progress.")

        self.merge_error = ""
        self.merge_status = ""
        recognised_uid = self.biometric.profile.uid
        found_uid = self.manual.profile.uid
        token = self.session.token

        if merge_type is MergeType.MERGE:
            if not self.biometric.is_new:
                raise ValidationError("Only a profile recognised as new can be merged.")
            self.merging = True
            found = self.manual.profile

            def on_merged(result: ApiResult):
                self.merging = False
                if result.ok:
                    # both uids now point at the same account
                    self.biometric = BiometricMatch(found, is_new=False)
                    self.merge_status = "Profile merged, you can press continue."
                    logger.info(f"[Identify] merged {recognised_uid} into {found_uid}")
                else:
                    self.merge_error = result.error_message("Failed to merge profiles.")
                    logger.warning(f"[Identify] merge {recognised_uid} -> {found_uid} failed: {self.merge_error}")

            self.dispatch(lambda: self.api.merge_users(token, recognised_uid, found_uid),
                          self._guard(on_merged))
            return

        if self.biometric.is_new:
            raise ValidationError("A new profile can only be merged, not corrected.")

        def on_reported(result: ApiResult):
            # the backend answer carries nothing we act on
            if not result.ok:
                logger.warning(f"[Identify] confusion report failed: {result.error_message('unknown error')}")

        self.dispatch(lambda: self.api.report_confused_user(token, recognised_uid, found_uid),
                      self._guard(on_reported))
        self.intent = ReconciliationIntent.FORCE_CORRECTION
        self.confirmed = None
        self.merge_status = "Correction request noted, you can press continue."
        logger.info(f"[Identify] corrected {recognised_uid} -> {found_uid}")
        self.on_change()

    def continue_with_best(self) -> Confirmed:
        if self.merging:
            raise ValidationError("Wait for the merge to finish.")
        if self.merge_error:
            raise ValidationError("Profiles are not reconciled. Retry the merge or reset.")
        if self.force_correction:
            candidate = self.manual
        elif isinstance(self.biometric, BiometricMatch):
            candidate = self.biometric
        else:
            candidate = self.manual
        if isinstance(candidate, Unresolved):
            raise ValidationError("No identity to continue with.")
        self.confirmed = Confirmed(candidate.profile)
        logger.info(f"[Identify] proceeding with uid={candidate.profile.uid}")
        return self.confirmed

    def reset(self):
        self._generation += 1
        self._clear()
        self.on_change()
