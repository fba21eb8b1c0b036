import os

import addict

SOLIDITY_LICENSE = 'MIT'
SOLIDITY_PRAGMA = '^0.8.20'
DEFAULT_SOLC_VERSION = os.getenv('TOKEN_WIZARD_SOLC_VERSION', '0.8.20')

# Import prefix of the shared contract library and where it lives on disk
OPENZEPPELIN_PREFIX = '@openzeppelin/contracts'
OPENZEPPELIN_PATH = os.getenv('TOKEN_WIZARD_OPENZEPPELIN_PATH',
                              os.path.join('.', 'node_modules', '@openzeppelin', 'contracts'))

# Hard cap on nested imports while flattening
MAX_IMPORT_DEPTH = 20

MAX_SYMBOL_LENGTH = 11
MAX_TAX_PERCENT = 25

# Source unit name of the generated contract in the solc standard json input
ENTRY_SOURCE_UNIT = 'Token.sol'

SOLC_SETTINGS = addict.Dict({
    'optimizer': {
        'enabled': True,
        'runs': 200,
    },
    'outputSelection': {
        '*': {
            '*': ['abi', 'evm.bytecode', 'evm.deployedBytecode'],
        },
    },
})
