"""Multi-step matrimony profile wizard.

The wizard stays a Draft until ``submit`` succeeds; nothing reaches the API
before then. Each step validates its own fields, and submission re-checks
every step plus the photo rules.
"""

import enum
from datetime import date
from typing import Literal, Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import age_on
from libs.common.logging import get_logger
from libs.matrimony.lifecycle import (
    PhotoRuleError,
    ProfileState,
    normalize_photos,
    require_submittable_photos,
)
from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from portal.api import ApiClient
from portal.errors import PortalError, ValidationFailed
from portal.payments import PaymentCoordinator, PurchaseTarget
from portal.state import AppState

logger = get_logger(__name__)
settings = get_settings()


class WizardStep(str, enum.Enum):
    PERSONAL = "personal"
    CONTACT = "contact"
    FAMILY = "family"
    CAREER = "career"
    BIO = "bio"
    PHOTOS = "photos"
    REVIEW = "review"


STEPS = list(WizardStep)


class PersonalStep(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    date_of_birth: date
    gender: Literal["male", "female", "other"]
    height: str = Field(..., min_length=1, max_length=20)
    weight: Optional[str] = Field(None, max_length=20)
    marital_status: Literal["never_married", "divorced", "widowed"]
    diet: Optional[Literal["vegetarian", "non-vegetarian", "eggetarian"]] = None

    @field_validator("date_of_birth")
    @classmethod
    def old_enough(cls, value: date) -> date:
        if age_on(value) < settings.MATRIMONY_MIN_AGE:
            raise ValueError(f"Must be at least {settings.MATRIMONY_MIN_AGE} years old")
        return value


class ContactStep(BaseModel):
    phone: str = Field(..., pattern=r"^\d{10}$")
    email: EmailStr
    current_address: str = Field(..., min_length=1, max_length=300)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)


class FamilyStep(BaseModel):
    father_name: Optional[str] = Field(None, max_length=100)
    mother_name: Optional[str] = Field(None, max_length=100)
    siblings: Optional[str] = Field(None, max_length=200)
    family_details: Optional[str] = Field(None, max_length=1000)


class CareerStep(BaseModel):
    education: str = Field(..., min_length=1, max_length=200)
    occupation: str = Field(..., min_length=1, max_length=200)
    employer_name: Optional[str] = Field(None, max_length=200)
    annual_income: Optional[str] = Field(None, max_length=50)


class BioStep(BaseModel):
    partner_preferences: Optional[str] = Field(None, max_length=1000)
    hobbies: Optional[str] = Field(None, max_length=500)
    about_me: Optional[str] = Field(None, max_length=2000)


STEP_MODELS: dict[WizardStep, type[BaseModel]] = {
    WizardStep.PERSONAL: PersonalStep,
    WizardStep.CONTACT: ContactStep,
    WizardStep.FAMILY: FamilyStep,
    WizardStep.CAREER: CareerStep,
    WizardStep.BIO: BioStep,
}


def _field_errors(exc: ValidationError) -> dict[str, str]:
    errors = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__all__"
        errors.setdefault(field, error["msg"])
    return errors


class ProfileWizard:
    def __init__(
        self,
        api: ApiClient,
        state: AppState,
        coordinator: Optional[PaymentCoordinator] = None,
    ):
        self.api = api
        self.state = state
        self.coordinator = coordinator
        self.data: dict = {}
        self.photos: list[dict] = []
        self.errors: dict[str, str] = {}
        self.step_index = 0
        self.lifecycle_state = ProfileState.DRAFT
        self.profile: Optional[dict] = None
        self.submitting = False

    @property
    def step(self) -> WizardStep:
        return STEPS[self.step_index]

    def update(self, **fields) -> None:
        self.data.update(fields)
        for name in fields:
            self.errors.pop(name, None)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def validate_step(self, step: Optional[WizardStep] = None) -> bool:
        """Check one step's fields; errors are kept on ``self.errors``."""
        step = step or self.step
        if step is WizardStep.PHOTOS:
            return self._check_photos()
        if step is WizardStep.REVIEW:
            return True

        model = STEP_MODELS[step]
        values = {k: self.data.get(k) for k in model.model_fields if self.data.get(k) not in (None, "")}
        try:
            model.model_validate(values)
        except ValidationError as e:
            self.errors.update(_field_errors(e))
            return False
        return True

    def next(self) -> bool:
        if not self.validate_step():
            return False
        self.step_index = min(self.step_index + 1, len(STEPS) - 1)
        return True

    def back(self) -> None:
        self.step_index = max(self.step_index - 1, 0)

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    async def upload_params(self) -> dict:
        """Signed parameters for uploading a photo straight to the media host."""
        return await self.api.signed_upload_params("matrimony")

    def add_photo(self, url: str, public_id: str) -> bool:
        candidate = self.photos + [{"url": url, "public_id": public_id, "is_primary": False}]
        try:
            self.photos = normalize_photos(candidate, settings.MATRIMONY_MAX_PHOTOS)
        except PhotoRuleError as e:
            self.state.notify(ValidationFailed(str(e)).notice)
            return False
        self.errors.pop("photos", None)
        return True

    def remove_photo(self, public_id: str) -> None:
        remaining = [p for p in self.photos if p["public_id"] != public_id]
        # First remaining photo takes over if the primary was removed.
        self.photos = normalize_photos(remaining, settings.MATRIMONY_MAX_PHOTOS)

    def set_primary(self, public_id: str) -> bool:
        if not any(photo["public_id"] == public_id for photo in self.photos):
            return False
        for photo in self.photos:
            photo["is_primary"] = photo["public_id"] == public_id
        return True

    def _check_photos(self) -> bool:
        try:
            require_submittable_photos(self.photos, settings.MATRIMONY_MAX_PHOTOS)
        except PhotoRuleError as e:
            self.errors["photos"] = str(e)
            return False
        return True

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def payload(self) -> dict:
        fields = {}
        for model in STEP_MODELS.values():
            for name in model.model_fields:
                value = self.data.get(name)
                if value not in (None, ""):
                    fields[name] = value.isoformat() if isinstance(value, date) else value
        return {**fields, "photos": self.photos}

    async def submit(self) -> Optional[dict]:
        """
        Create the profile, then start checkout when it needs payment.

        Returns the created profile, or None when validation or the API
        rejected the submission.
        """
        if self.submitting or self.lifecycle_state is not ProfileState.DRAFT:
            return self.profile

        for index, step in enumerate(STEPS):
            if not self.validate_step(step):
                self.step_index = index
                self.state.notify(ValidationFailed().notice)
                return None

        self.submitting = True
        try:
            profile = await self.api.create_profile(self.payload())
        except PortalError as e:
            self.state.notify(e.notice)
            return None
        finally:
            self.submitting = False

        self.profile = profile
        self.lifecycle_state = ProfileState(profile["lifecycle_state"])
        self.state.replace_profile(profile)
        logger.info(f"Profile {profile['id']} submitted ({self.lifecycle_state.value})")

        if self.lifecycle_state is ProfileState.PENDING_PAYMENT and self.coordinator:
            await self.coordinator.pay(PurchaseTarget.profile(profile["id"]))
            self._sync_from_state()
        return self.profile

    async def retry_payment(self):
        """Pay again for a submitted profile that is still pending payment."""
        if self.profile is None or self.coordinator is None:
            return None
        outcome = await self.coordinator.pay(PurchaseTarget.profile(self.profile["id"]))
        self._sync_from_state()
        return outcome

    def _sync_from_state(self) -> None:
        for profile in self.state.my_profiles:
            if profile["id"] == self.profile["id"]:
                self.profile = profile
                self.lifecycle_state = ProfileState(profile["lifecycle_state"])
                return
