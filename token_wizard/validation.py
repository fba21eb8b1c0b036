# Validation and defaulting of raw token configurations, e.g. a request body.
# The generator does not re-check any of this.

from typing import Any, Dict

from eth_utils import is_address, to_checksum_address

from . import consts
from .fields import ACCESS_CONTROL_OPTIONS, ACCESS_OWNABLE, TokenFeatureConfig
from .shared import TokenWizardError, contract_identifier

# camelCase request keys -> TokenFeatureConfig fields
FIELD_ALIASES = {
    'initialSupply': 'initial_supply',
    'maxSupply':     'max_supply',
    'buyTax':        'buy_tax',
    'sellTax':       'sell_tax',
    'taxReceiver':   'tax_receiver',
    'accessControl': 'access_control',
}

DEFAULTS = {
    'max_supply':     0,
    'mintable':       False,
    'burnable':       True,
    'pausable':       False,
    'buy_tax':        0,
    'sell_tax':       0,
    'tax_receiver':   '',
    'access_control': ACCESS_OWNABLE,
}

FORBIDDEN_NAME_CHARS = '"\\\n\r'


class ConfigError(TokenWizardError):
    pass


def normalize_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {FIELD_ALIASES.get(k, k): v for k, v in raw.items()}


def parse_amount(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f'{label} must be a non-negative integer')
    try:
        amount = int(str(value).strip())
    except ValueError:
        raise ConfigError(f'{label} must be a non-negative integer')
    if amount < 0:
        raise ConfigError(f'{label} must be a non-negative integer')
    return amount


def parse_tax(value: Any, label: str) -> int:
    tax = parse_amount(value, label)
    if tax > consts.MAX_TAX_PERCENT:
        raise ConfigError(f'Tax cannot exceed {consts.MAX_TAX_PERCENT}%')
    return tax


def validate_config(raw: Dict[str, Any]) -> TokenFeatureConfig:
    '''
    Check a raw configuration and return it as a `TokenFeatureConfig` with
    defaults filled in. Accepts request style camelCase keys as well as the
    dataclass field names. Raises `ConfigError` with a user facing message.
    '''
    data = dict(DEFAULTS)
    data.update({k: v for k, v in normalize_keys(raw).items() if v is not None})

    name = str(data.get('name') or '').strip()
    symbol = str(data.get('symbol') or '').strip()
    initial_supply = data.get('initial_supply')
    if not name or not symbol or initial_supply in (None, ''):
        raise ConfigError('Name, symbol, and initial supply are required')

    if len(symbol) > consts.MAX_SYMBOL_LENGTH:
        raise ConfigError(f'Symbol must be {consts.MAX_SYMBOL_LENGTH} characters or less')
    if any(c in name or c in symbol for c in FORBIDDEN_NAME_CHARS):
        raise ConfigError('Name and symbol may not contain quotes, backslashes or line breaks')
    if not (name.isascii() and symbol.isascii()):
        raise ConfigError('Name and symbol must be ASCII')
    identifier = contract_identifier(symbol)
    if identifier == 'Token':
        raise ConfigError('Symbol must contain at least one letter or digit')
    if identifier[0].isdigit():
        raise ConfigError('Symbol must not start with a digit')

    initial_supply = parse_amount(initial_supply, 'Initial supply')
    max_supply = parse_amount(data['max_supply'] or 0, 'Max supply')
    if max_supply and max_supply < initial_supply:
        raise ConfigError('Max supply must be greater than or equal to initial supply')

    buy_tax = parse_tax(data['buy_tax'] or 0, 'Buy tax')
    sell_tax = parse_tax(data['sell_tax'] or 0, 'Sell tax')

    tax_receiver = str(data['tax_receiver'] or '').strip()
    if tax_receiver:
        if not is_address(tax_receiver):
            raise ConfigError(f'Invalid tax receiver address: {tax_receiver}')
        tax_receiver = to_checksum_address(tax_receiver)

    access_control = data['access_control']
    if access_control not in ACCESS_CONTROL_OPTIONS:
        raise ConfigError(f'Access control must be one of {", ".join(ACCESS_CONTROL_OPTIONS)}')

    return TokenFeatureConfig(
        name=name,
        symbol=symbol,
        initial_supply=initial_supply,
        max_supply=max_supply,
        mintable=bool(data['mintable']),
        burnable=bool(data['burnable']),
        pausable=bool(data['pausable']),
        buy_tax=buy_tax,
        sell_tax=sell_tax,
        tax_receiver=tax_receiver,
        access_control=access_control,
    )
