from .config import AccessConfig, LogLevel, load_config_from_env
from .exceptions import (
    AccessCoreError,
    ConfigurationError,
    MatrixCompletenessError,
    PolicyError,
    PolicyLoadError,
)
from .logging import (
    AccessLogFormatter,
    AccessLoggerAdapter,
    get_access_logger,
    safe_preview,
    setup_logging,
)
from .permissions import (
    AccessDecision,
    AccessMatrix,
    AccessResolver,
    ActorDescriptor,
    BatchDecision,
    Capabilities,
    Limits,
    Policy,
    PolicyStore,
    ProfessionalType,
    ReasonCode,
    RequirementDescriptor,
    RequirementIndex,
    Role,
    SubscriptionTier,
    UpgradeAdvisor,
    UpgradeSuggestion,
    available_capabilities,
    has_min_role,
    limit,
    rank,
    resolve,
    resolve_many,
    suggest,
    upgrade_message,
    validate_matrix,
)
from .service import AccessRequest, AccessResponse, AccessService, LimitRequest, LimitResponse

__all__ = [
    'AccessConfig',
    'LogLevel',
    'load_config_from_env',
    'AccessCoreError',
    'ConfigurationError',
    'MatrixCompletenessError',
    'PolicyError',
    'PolicyLoadError',
    'AccessLogFormatter',
    'AccessLoggerAdapter',
    'get_access_logger',
    'safe_preview',
    'setup_logging',
    'AccessDecision',
    'AccessMatrix',
    'AccessResolver',
    'ActorDescriptor',
    'BatchDecision',
    'Capabilities',
    'Limits',
    'Policy',
    'PolicyStore',
    'ProfessionalType',
    'ReasonCode',
    'RequirementDescriptor',
    'RequirementIndex',
    'Role',
    'SubscriptionTier',
    'UpgradeAdvisor',
    'UpgradeSuggestion',
    'available_capabilities',
    'has_min_role',
    'limit',
    'rank',
    'resolve',
    'resolve_many',
    'suggest',
    'upgrade_message',
    'validate_matrix',
    'AccessRequest',
    'AccessResponse',
    'AccessService',
    'LimitRequest',
    'LimitResponse',
]
