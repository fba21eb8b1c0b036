from dataclasses import dataclass, field
from functools import cached_property
from typing import List, Union

from .shared import keccak256

ACCESS_OWNABLE = 'ownable'
ACCESS_ROLES   = 'roles'
ACCESS_NONE    = 'none'
ACCESS_CONTROL_OPTIONS = (ACCESS_OWNABLE, ACCESS_ROLES, ACCESS_NONE)

Amount = Union[int, str]


@dataclass(frozen=True)
class TokenFeatureConfig:
    name:           str
    symbol:         str
    initial_supply: Amount = 0    # whole tokens, scaled by decimals() in the contract
    max_supply:     Amount = 0    # 0 means unlimited
    mintable:       bool   = False
    burnable:       bool   = True
    pausable:       bool   = False
    buy_tax:        int    = 0    # percent
    sell_tax:       int    = 0    # percent
    tax_receiver:   str    = ''   # empty means the deployer
    access_control: str    = ACCESS_OWNABLE

    @property
    def has_tax(self) -> bool:
        return int(self.buy_tax or 0) > 0 or int(self.sell_tax or 0) > 0

    @property
    def has_max_supply(self) -> bool:
        return _to_int(self.max_supply) > 0

    @property
    def has_initial_supply(self) -> bool:
        return _to_int(self.initial_supply) > 0


@dataclass(frozen=True)
class GeneratedSource:
    source:        str
    contract_name: str
    config:        TokenFeatureConfig

    @cached_property
    def source_hash(self) -> str:
        return keccak256(self.source)

    def __str__(self) -> str:
        return self.source


@dataclass
class CompiledContract:
    contract_name:      str
    abi:                List[dict]
    bytecode:           str
    deployed_bytecode:  str
    solc_version:       str
    warnings:           List[str] = field(default_factory=list)


def _to_int(value: Amount) -> int:
    if value is None or value == '':
        return 0
    return int(value)
