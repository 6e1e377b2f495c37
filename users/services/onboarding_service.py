# FILE: medvanta/backend/users/services/onboarding_service.py

"""
ONBOARDING SERVICE

Admin override of a member's onboarding progress.

Targets:
- full: restart onboarding (all steps cleared)
- screening: screening done, consultation still open
- consultation: screening, intro and consultation done

The journey phase always follows the flags after an override.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from django.contrib.auth import get_user_model
from django.db import transaction

from core.exceptions import ValidationFailedException

logger = logging.getLogger(__name__)

User = get_user_model()


TARGET_FULL = "full"
TARGET_SCREENING = "screening"
TARGET_CONSULTATION = "consultation"
ONBOARDING_TARGETS = (TARGET_FULL, TARGET_SCREENING, TARGET_CONSULTATION)

TARGET_FLAGS = {
    TARGET_FULL: {
        "screening_completed": False,
        "intro_completed": False,
        "consultation_completed": False,
    },
    TARGET_SCREENING: {
        "screening_completed": True,
        "consultation_completed": False,
    },
    TARGET_CONSULTATION: {
        "screening_completed": True,
        "intro_completed": True,
        "consultation_completed": True,
    },
}


def derive_journey_phase(user) -> str:
    if user.consultation_completed:
        return User.JourneyPhase.SCAFFOLDING
    if user.screening_completed:
        return User.JourneyPhase.ONBOARDING
    return User.JourneyPhase.DISCOVERY


@dataclass
class OnboardingResult:
    """Outcome of a bulk onboarding override"""
    target: str
    updated_count: int = 0
    updated_ids: List[str] = field(default_factory=list)


class OnboardingService:

    @transaction.atomic
    def set_onboarding_state(self, user_ids: Iterable, target: str) -> OnboardingResult:
        """
        Apply an onboarding target to one or many members.

        Args:
            user_ids: Members to update; unknown ids are ignored
            target: full, screening or consultation

        Returns:
            OnboardingResult with the number of members updated
        """
        if target not in ONBOARDING_TARGETS:
            raise ValidationFailedException(
                f"Onboarding target must be one of: {', '.join(ONBOARDING_TARGETS)}."
            )

        flags = TARGET_FLAGS[target]
        result = OnboardingResult(target=target)

        for user in User.objects.select_for_update().filter(id__in=list(user_ids)):
            for key, value in flags.items():
                setattr(user, key, value)
            user.journey_phase = derive_journey_phase(user)
            user.save(update_fields=list(flags) + ["journey_phase", "updated_at"])
            result.updated_count += 1
            result.updated_ids.append(str(user.id))

        logger.info(f"Onboarding set to '{target}' for {result.updated_count} user(s)")
        return result
