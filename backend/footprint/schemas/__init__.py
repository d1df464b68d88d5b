from .user_schemas import UserRegistrationSchema, UserLoginSchema
from .emission_schema import (
    EmissionSchema,
    validate_emission_data,
    validate_analysis_params,
    parse_analysis_params
)

__all__ = [
    'UserRegistrationSchema',
    'UserLoginSchema',
    'EmissionSchema',
    'validate_emission_data',
    'validate_analysis_params',
    'parse_analysis_params'
]
