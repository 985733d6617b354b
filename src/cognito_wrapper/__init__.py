"""
Cognito wrapper and its ordered user-lifecycle suite.

Usage:
    from cognito_wrapper import CognitoWrapper, load_settings, run_sequence

    settings = load_settings()
    wrapper = CognitoWrapper(region_name=settings.region)
    results = await run_sequence(wrapper, settings)
"""

from .config import ConfigError, SuiteSettings, load_settings
from .logging_config import configure_logging
from .sequence import (
    STEPS,
    MissingSequenceState,
    SequenceContext,
    SequenceRun,
    StepFailed,
    StepResult,
    run_sequence,
)
from .wrappers import (
    CognitoWrapper,
    IdentityProviderError,
    IdentityProviderWrapper,
    MockCognitoWrapper,
)

__all__ = [
    'ConfigError',
    'SuiteSettings',
    'load_settings',
    'configure_logging',
    'STEPS',
    'MissingSequenceState',
    'SequenceContext',
    'SequenceRun',
    'StepFailed',
    'StepResult',
    'run_sequence',
    'CognitoWrapper',
    'IdentityProviderError',
    'IdentityProviderWrapper',
    'MockCognitoWrapper',
]
