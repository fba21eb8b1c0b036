'''
Solidity source generator for configurable ERC-20 tokens.

The contract is assembled from ordered, optional blocks (imports, state
variables, events, constructor, functions, transfer hook). Each block is
decided from the feature configuration alone; empty blocks are skipped when
the document is joined. The generator trusts its input: range checks on
symbol, taxes and supplies belong to `token_wizard.validation`.
'''
from typing import Dict, List, Optional

from . import consts
from .fields import (ACCESS_NONE, ACCESS_OWNABLE, ACCESS_ROLES, GeneratedSource,
                     TokenFeatureConfig)
from .shared import contract_identifier

INDENT = '    '

OZ_IMPORTS = {
    'ERC20':          'token/ERC20/ERC20.sol',
    'ERC20Burnable':  'token/ERC20/extensions/ERC20Burnable.sol',
    'ERC20Pausable':  'token/ERC20/extensions/ERC20Pausable.sol',
    'Ownable':        'access/Ownable.sol',
    'AccessControl':  'access/AccessControl.sol',
}

ACCESS_BASES = {
    ACCESS_OWNABLE: 'Ownable',
    ACCESS_ROLES:   'AccessControl',
}

ACCESS_LABELS = {
    ACCESS_OWNABLE: 'Ownable',
    ACCESS_ROLES:   'Role-Based',
    ACCESS_NONE:    'None',
}

TAX_EVENTS = [
    'event TaxUpdated(uint256 buyTax, uint256 sellTax);',
    'event TaxReceiverUpdated(address newReceiver);',
    'event DexPairUpdated(address pair, bool status);',
    'event ExcludedFromTax(address account, bool excluded);',
]


def indent(lines: List[str], level: int = 1) -> List[str]:
    return [f'{INDENT * level}{l}' if l else '' for l in lines]


def yes_no(flag: bool) -> str:
    return 'Yes' if flag else 'No'


class ContractBuilder():
    '''
    Accumulates the pieces of one contract. Every piece is a list of lines
    without indentation; `build` indents and joins the non-empty ones.
    '''
    def __init__(self, config: TokenFeatureConfig) -> None:
        self.config = config
        self.contract_name = contract_identifier(config.symbol)
        self.bases: List[str] = ['ERC20']
        self.state: List[str] = []
        self.events: List[str] = []
        self.constructor_args: List[str] = []
        self.constructor_body: List[str] = []
        self.functions: List[List[str]] = []

    # Access control

    @property
    def access_control(self) -> str:
        return self.config.access_control

    def modifier(self, role: Optional[str] = None) -> str:
        '''
        Modifier gating a privileged function. `role` is the role constant
        used under role based access, default admin when not given.
        '''
        if self.access_control == ACCESS_OWNABLE:
            return 'onlyOwner'
        if self.access_control == ACCESS_ROLES:
            return f'onlyRole({role or "DEFAULT_ADMIN_ROLE"})'
        return ''

    def function(self, signature: str, body: List[str], modifier: str = '') -> None:
        head = ' '.join(p for p in (signature, modifier) if p)
        self.functions.append([f'{head} {{', *indent(body), '}'])

    # Blocks, in the order they appear in the contract

    def add_bases(self):
        c = self.config
        if c.burnable:
            self.bases.append('ERC20Burnable')
        if c.pausable:
            self.bases.append('ERC20Pausable')
        if self.access_control in ACCESS_BASES:
            self.bases.append(ACCESS_BASES[self.access_control])

    def add_state(self):
        c = self.config
        if c.has_max_supply:
            self.state.append('uint256 public maxSupply;')
        if c.mintable:
            self.state.append('bool public mintable;')
        if c.has_tax:
            self.state += [
                'uint256 public buyTaxPercent;',
                'uint256 public sellTaxPercent;',
                'address public taxReceiver;',
                '',
                'mapping(address => bool) public isDexPair;',
                'mapping(address => bool) public isExcludedFromTax;',
            ]
        if self.access_control == ACCESS_ROLES:
            if c.mintable:
                self.state.append('bytes32 public constant MINTER_ROLE = keccak256("MINTER_ROLE");')
            if c.pausable:
                self.state.append('bytes32 public constant PAUSER_ROLE = keccak256("PAUSER_ROLE");')

    def add_events(self):
        if self.config.has_tax:
            self.events += TAX_EVENTS

    def add_constructor(self):
        c = self.config
        self.constructor_args.append(f'ERC20("{c.name}", "{c.symbol}")')
        if self.access_control == ACCESS_OWNABLE:
            self.constructor_args.append('Ownable(msg.sender)')
        elif self.access_control == ACCESS_ROLES:
            self.constructor_body.append('_grantRole(DEFAULT_ADMIN_ROLE, msg.sender);')
            if c.mintable:
                self.constructor_body.append('_grantRole(MINTER_ROLE, msg.sender);')
            if c.pausable:
                self.constructor_body.append('_grantRole(PAUSER_ROLE, msg.sender);')

        if c.has_max_supply:
            self.constructor_body.append(f'maxSupply = {c.max_supply} * 10 ** decimals();')
        if c.mintable:
            self.constructor_body.append('mintable = true;')
        if c.has_tax:
            receiver = f'address({c.tax_receiver})' if c.tax_receiver else 'msg.sender'
            self.constructor_body += [
                f'buyTaxPercent = {c.buy_tax};',
                f'sellTaxPercent = {c.sell_tax};',
                f'taxReceiver = {receiver};',
                '',
                'isExcludedFromTax[msg.sender] = true;',
                'isExcludedFromTax[address(this)] = true;',
            ]
        if c.has_initial_supply:
            if self.constructor_body:
                self.constructor_body.append('')
            self.constructor_body.append(f'_mint(msg.sender, {c.initial_supply} * 10 ** decimals());')

    def add_mint(self):
        if not self.config.mintable:
            return
        body = ['require(mintable, "Minting disabled");']
        if self.config.has_max_supply:
            body += [
                'if (maxSupply > 0) {',
                f'{INDENT}require(totalSupply() + amount <= maxSupply, "Exceeds max supply");',
                '}',
            ]
        body.append('_mint(to, amount);')
        self.function('function mint(address to, uint256 amount) external', body,
                      self.modifier('MINTER_ROLE'))

    def add_pause(self):
        if not self.config.pausable or self.access_control == ACCESS_NONE:
            return
        modifier = self.modifier('PAUSER_ROLE')
        self.function('function pause() external', ['_pause();'], modifier)
        self.function('function unpause() external', ['_unpause();'], modifier)

    def add_tax_admin(self):
        if not self.config.has_tax or self.access_control == ACCESS_NONE:
            return
        modifier = self.modifier()
        limit = consts.MAX_TAX_PERCENT
        self.function('function setTaxPercent(uint256 buyTax_, uint256 sellTax_) external', [
            f'require(buyTax_ <= {limit}, "Buy tax too high");',
            f'require(sellTax_ <= {limit}, "Sell tax too high");',
            'buyTaxPercent = buyTax_;',
            'sellTaxPercent = sellTax_;',
            'emit TaxUpdated(buyTax_, sellTax_);',
        ], modifier)
        self.function('function setTaxReceiver(address receiver_) external', [
            'require(receiver_ != address(0), "Invalid address");',
            'taxReceiver = receiver_;',
            'emit TaxReceiverUpdated(receiver_);',
        ], modifier)
        self.function('function setDexPair(address pair_, bool status_) external', [
            'isDexPair[pair_] = status_;',
            'emit DexPairUpdated(pair_, status_);',
        ], modifier)
        self.function('function setExcludedFromTax(address account_, bool excluded_) external', [
            'isExcludedFromTax[account_] = excluded_;',
            'emit ExcludedFromTax(account_, excluded_);',
        ], modifier)

    def add_disable_minting(self):
        if not self.config.mintable or self.access_control == ACCESS_NONE:
            return
        self.function('function disableMinting() external', ['mintable = false;'], self.modifier())

    def add_transfer_hook(self):
        '''
        `_update` override. Order: zero address or exempt party passes
        through untaxed, buy tax when the sender is a dex pair, otherwise
        sell tax when the receiver is one, tax goes to `taxReceiver` and the
        rest to the recipient.
        '''
        c = self.config
        if not (c.has_tax or c.pausable):
            return
        override = 'override(ERC20, ERC20Pausable)' if c.pausable else 'override'
        body = []
        if c.has_tax:
            if c.pausable:
                body += ['_requireNotPaused();', '']
            body += [
                'if (from == address(0) || to == address(0) ||',
                f'{INDENT}isExcludedFromTax[from] || isExcludedFromTax[to]) {{',
                f'{INDENT}super._update(from, to, amount);',
                f'{INDENT}return;',
                '}',
                '',
                'uint256 taxAmount = 0;',
                '',
                'if (isDexPair[from] && buyTaxPercent > 0) {',
                f'{INDENT}taxAmount = (amount * buyTaxPercent) / 100;',
                '}',
                'else if (isDexPair[to] && sellTaxPercent > 0) {',
                f'{INDENT}taxAmount = (amount * sellTaxPercent) / 100;',
                '}',
                '',
                'if (taxAmount > 0) {',
                f'{INDENT}super._update(from, taxReceiver, taxAmount);',
                f'{INDENT}amount -= taxAmount;',
                '}',
                '',
            ]
        body.append('super._update(from, to, amount);')
        self.functions.append([
            'function _update(',
            f'{INDENT}address from,',
            f'{INDENT}address to,',
            f'{INDENT}uint256 amount',
            f') internal virtual {override} {{',
            *indent(body),
            '}',
        ])

    def add_supports_interface(self):
        if self.access_control != ACCESS_ROLES:
            return
        self.function('function supportsInterface(bytes4 interfaceId) public view virtual '
                      'override(AccessControl) returns (bool)',
                      ['return super.supportsInterface(interfaceId);'])

    # Assembly

    def imports(self) -> List[str]:
        return [f'import "{consts.OPENZEPPELIN_PREFIX}/{OZ_IMPORTS[base]}";' for base in self.bases]

    def header(self) -> List[str]:
        c = self.config
        return [
            '/**',
            f' * @title {c.name}',
            ' * @dev ERC-20 Token with the following features:',
            f' * - Symbol: {c.symbol}',
            f' * - Initial Supply: {c.initial_supply or 0}',
            f' * - Max Supply: {c.max_supply if c.has_max_supply else "Unlimited"}',
            f' * - Mintable: {yes_no(c.mintable)}',
            f' * - Burnable: {yes_no(c.burnable)}',
            f' * - Pausable: {yes_no(c.pausable)}',
            f' * - Buy Tax: {c.buy_tax}%',
            f' * - Sell Tax: {c.sell_tax}%',
            f' * - Access Control: {ACCESS_LABELS.get(self.access_control, self.access_control)}',
            ' */',
        ]

    def constructor(self) -> List[str]:
        return [f'constructor() {" ".join(self.constructor_args)} {{', *indent(self.constructor_body), '}']

    def build(self) -> str:
        for step in (self.add_bases, self.add_state, self.add_events, self.add_constructor,
                     self.add_mint, self.add_pause, self.add_tax_admin, self.add_disable_minting,
                     self.add_transfer_hook, self.add_supports_interface):
            step()

        members = [self.state, self.events, self.constructor(), *self.functions]
        body = '\n\n'.join('\n'.join(indent(m)) for m in members if m)
        preamble = [
            f'// SPDX-License-Identifier: {consts.SOLIDITY_LICENSE}',
            f'pragma solidity {consts.SOLIDITY_PRAGMA};',
        ]
        blocks = [
            '\n'.join(preamble),
            '\n'.join(self.imports()),
            '\n'.join(self.header()) + '\n'
            + f'contract {self.contract_name} is {", ".join(self.bases)} {{\n{body}\n}}',
        ]
        return '\n\n'.join(b for b in blocks if b) + '\n'


def generate_contract_code(config: TokenFeatureConfig) -> GeneratedSource:
    '''
    Generate the solidity source of a token contract. Deterministic, no I/O.
    '''
    builder = ContractBuilder(config)
    source = builder.build()
    return GeneratedSource(source=source, contract_name=builder.contract_name, config=config)


generate = generate_contract_code


def generate_token_source(params: Dict) -> GeneratedSource:
    '''
    Fixed template used on the deployment path: an ownable, burnable,
    non-pausable token. `params` uses the request field names
    (`initialSupply`, `maxSupply`, `buyTax`, `sellTax`, `taxReceiver`).
    Unknown keys such as `owner` are ignored.
    '''
    config = TokenFeatureConfig(
        name=params['name'],
        symbol=params['symbol'],
        initial_supply=params.get('initialSupply') or 0,
        max_supply=params.get('maxSupply') or 0,
        mintable=bool(params.get('mintable', False)),
        burnable=True,
        pausable=False,
        buy_tax=params.get('buyTax') or 0,
        sell_tax=params.get('sellTax') or 0,
        tax_receiver=params.get('taxReceiver') or '',
        access_control=ACCESS_OWNABLE,
    )
    return generate_contract_code(config)
