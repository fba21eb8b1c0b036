from .fields import TokenFeatureConfig, GeneratedSource, CompiledContract
from .generator import generate_contract_code, generate_token_source
from .flatten import flatten, FlattenError, RecursionDepthExceeded
from .validation import validate_config, ConfigError
