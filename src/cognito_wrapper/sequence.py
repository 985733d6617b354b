"""
Ordered user-lifecycle sequence against an identity-provider wrapper.

Steps (each one wrapper call and one check):
     1 - sign up
     2 - list user pools
     3 - admin user status is CONFIRMED
     4 - resend confirmation code to the configured email
     5 - confirm sign-up with the MFA token
     6 - initiate auth, capture the session
     7 - list users
     8 - verify software token
     9 - associate software token
    10 - respond to the software-token MFA challenge

Later steps read state that earlier steps put into the SequenceContext, so
the steps must run in ascending order within one run. A failed step does not
stop the run; dependent steps then fail on the missing state.

Nothing in the sequence produces the MFA token. Steps 5, 8 and 10 send None
unless the caller seeds the context, e.g. with ``with_mfa_secret``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Dict, List, Optional

from .config import SuiteSettings
from .mfa import totp_code
from .wrappers.base import IdentityProviderWrapper

logger = logging.getLogger(__name__)


class StepFailed(AssertionError):
    """A step's check did not hold.

    ``context`` is set when the step still changed shared state before its
    check failed; the run adopts it.
    """

    def __init__(self, message: str, context: Optional["SequenceContext"] = None):
        super().__init__(message)
        self.context = context


class MissingSequenceState(StepFailed):
    """A step needs state that no earlier step in this run produced."""
    pass


@dataclass(frozen=True)
class SequenceContext:
    """State threaded from one step to the next."""

    mfa_token: Optional[str] = None
    session: Optional[str] = None

    def with_mfa_secret(self, secret: str) -> "SequenceContext":
        """Seed the MFA token with the current TOTP code for ``secret``."""
        return replace(self, mfa_token=totp_code(secret))


@dataclass
class StepResult:
    order: int
    name: str
    passed: bool
    error: Optional[BaseException] = None

    def raise_for_failure(self) -> None:
        """Re-raise the error recorded for a failed step."""
        if self.error is not None:
            raise self.error


StepFunc = Callable[[IdentityProviderWrapper, SuiteSettings, SequenceContext], Awaitable[SequenceContext]]


@dataclass(frozen=True)
class Step:
    order: int
    name: str
    run: StepFunc


def _require_session(context: SequenceContext, step: str) -> str:
    if not context.session:
        raise MissingSequenceState(f"{step} needs a session; initiate_auth has not captured one in this run")
    return context.session


def _mfa_token(context: SequenceContext, step: str) -> Optional[str]:
    if context.mfa_token is None:
        logger.warning(f"{step}: no MFA token in context, sending None")
    return context.mfa_token


# ---- steps ------------------------------------------------------------------

async def sign_up(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                  context: SequenceContext) -> SequenceContext:
    success = await wrapper.sign_up(settings.client_id, settings.user_name, settings.password, settings.email)
    if not success:
        raise StepFailed(f"sign-up for {settings.user_name} was not acknowledged")
    return context


async def list_user_pools(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                          context: SequenceContext) -> SequenceContext:
    pools = await wrapper.list_user_pools()
    if pools is None:
        raise StepFailed("list_user_pools returned nothing")
    return context


async def get_admin_user(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                         context: SequenceContext) -> SequenceContext:
    status = await wrapper.get_admin_user(settings.user_name, settings.user_pool_id)
    if status != "CONFIRMED":
        raise StepFailed(f"expected user status CONFIRMED, got {status}")
    return context


async def resend_confirmation_code(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                                   context: SequenceContext) -> SequenceContext:
    details = await wrapper.resend_confirmation_code(settings.client_id, settings.user_name)
    destination = details.get("Destination") if details else None
    if destination != settings.email:
        raise StepFailed(f"code sent to {destination}, expected {settings.email}")
    return context


async def confirm_signup(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                         context: SequenceContext) -> SequenceContext:
    token = _mfa_token(context, "confirm_signup")
    success = await wrapper.confirm_signup(settings.client_id, token, settings.user_name)
    if not success:
        raise StepFailed(f"sign-up confirmation for {settings.user_name} was not acknowledged")
    return context


async def initiate_auth(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                        context: SequenceContext) -> SequenceContext:
    response = await wrapper.initiate_auth(settings.client_id, settings.user_name, settings.password)
    session = response.get("Session") if response else None
    updated = replace(context, session=session)
    if not session:
        # A session from an earlier attempt must not outlive this one
        raise StepFailed("initiate_auth returned no session", updated)
    return updated


async def list_users(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                     context: SequenceContext) -> SequenceContext:
    users = await wrapper.list_users(settings.user_pool_id)
    if users is None:
        raise StepFailed("list_users returned nothing")
    return context


async def verify_software_token(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                                context: SequenceContext) -> SequenceContext:
    session = _require_session(context, "verify_software_token")
    status = await wrapper.verify_software_token(session, _mfa_token(context, "verify_software_token"))
    if status != "SUCCESS":
        raise StepFailed(f"expected software token status SUCCESS, got {status}")
    return context


async def associate_software_token(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                                   context: SequenceContext) -> SequenceContext:
    session = _require_session(context, "associate_software_token")
    association = await wrapper.associate_software_token(session)
    if association is None:
        raise StepFailed("associate_software_token returned nothing")
    return context


async def respond_to_auth_challenge(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                                    context: SequenceContext) -> SequenceContext:
    session = _require_session(context, "respond_to_auth_challenge")
    result = await wrapper.respond_to_auth_challenge(
        settings.user_name,
        settings.client_id,
        _mfa_token(context, "respond_to_auth_challenge"),
        session,
    )
    if result is None:
        raise StepFailed("respond_to_auth_challenge returned no authentication result")
    return context


STEPS: List[Step] = [
    Step(1, "sign_up", sign_up),
    Step(2, "list_user_pools", list_user_pools),
    Step(3, "get_admin_user", get_admin_user),
    Step(4, "resend_confirmation_code", resend_confirmation_code),
    Step(5, "confirm_signup", confirm_signup),
    Step(6, "initiate_auth", initiate_auth),
    Step(7, "list_users", list_users),
    Step(8, "verify_software_token", verify_software_token),
    Step(9, "associate_software_token", associate_software_token),
    Step(10, "respond_to_auth_challenge", respond_to_auth_challenge),
]

_STEPS_BY_ORDER: Dict[int, Step] = {step.order: step for step in STEPS}


class SequenceRun:
    """One pass through the ordered steps.

    Holds the wrapper, the settings and the context produced so far. Steps
    are awaited one at a time; never share a run between concurrent tasks.
    """

    def __init__(self, wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                 context: Optional[SequenceContext] = None):
        self.wrapper = wrapper
        self.settings = settings
        self.context = context or SequenceContext()
        self.results: List[StepResult] = []

    @property
    def last_order(self) -> int:
        return self.results[-1].order if self.results else 0

    async def run_step(self, order: int) -> StepResult:
        """Run a single step and record its outcome.

        Errors from the wrapper or the check are recorded, not raised; use
        ``StepResult.raise_for_failure`` to surface them.
        """
        step = _STEPS_BY_ORDER.get(order)
        if step is None:
            raise ValueError(f"Unknown step: {order}")

        if order <= self.last_order:
            logger.warning(f"Step {order} ({step.name}) run after step {self.last_order}; sequence is out of order")

        try:
            self.context = await step.run(self.wrapper, self.settings, self.context)
        except Exception as e:
            if isinstance(e, StepFailed) and e.context is not None:
                self.context = e.context
            logger.error(f"Step {order} ({step.name}) failed: {e}")
            result = StepResult(order, step.name, False, e)
        else:
            logger.info(f"Step {order} ({step.name}) passed")
            result = StepResult(order, step.name, True)

        self.results.append(result)
        return result

    async def run_all(self) -> List[StepResult]:
        for step in STEPS:
            await self.run_step(step.order)
        return list(self.results)


async def run_sequence(wrapper: IdentityProviderWrapper, settings: SuiteSettings,
                       context: Optional[SequenceContext] = None) -> List[StepResult]:
    """Run all ten steps in order and return every result."""
    run = SequenceRun(wrapper, settings, context)
    results = await run.run_all()
    failed = [r.name for r in results if not r.passed]
    if failed:
        logger.warning(f"Sequence finished with {len(failed)} failed steps: {', '.join(failed)}")
    else:
        logger.info("Sequence finished, all steps passed")
    return results
