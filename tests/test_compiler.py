import unittest
from unittest import mock

from solcx.exceptions import SolcError, SolcInstallationError, SolcNotInstalled

from token_wizard.compiler import CompilationError, build_input_json, collect_sources, compile_contract
from token_wizard.generator import generate_token_source

FILES = {
    '@openzeppelin/contracts/token/ERC20/ERC20.sol': 'import {IERC20} from "./IERC20.sol";\nimport "../../utils/Context.sol";\ncontract ERC20 {}\n',
    '@openzeppelin/contracts/token/ERC20/IERC20.sol': 'interface IERC20 {}\n',
    '@openzeppelin/contracts/utils/Context.sol': 'abstract contract Context {}\n',
    '@openzeppelin/contracts/token/ERC20/extensions/ERC20Burnable.sol': 'import "../ERC20.sol";\nimport {Context} from "../../../utils/Context.sol";\nabstract contract ERC20Burnable {}\n',
    '@openzeppelin/contracts/access/Ownable.sol': 'import "../utils/Context.sol";\nabstract contract Ownable {}\n',
}

SOURCE = generate_token_source({'name': 'Launch', 'symbol': 'LCH', 'initialSupply': 1000}).source


def solc_output(errors=None):
    contract = {
        'abi': [{'type': 'function', 'name': 'mint', 'inputs': []}],
        'evm': {'bytecode': {'object': '6080'}, 'deployedBytecode': {'object': '6081'}},
    }
    output = {'contracts': {'Token.sol': {'Helper': contract, 'LCHToken': contract}}}
    if errors is not None:
        output['errors'] = errors
    return output


class TestCompiler(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch('token_wizard.compiler.solcx.get_installed_solc_versions',
                             return_value=['0.8.19', '0.8.20', '0.8.21'])
        self.installed = patcher.start()
        self.addCleanup(patcher.stop)

    def test_collect_sources(self):
        sources = collect_sources(SOURCE, FILES.get)
        self.assertEqual({'Token.sol', *FILES.keys()}, set(sources.keys()))
        self.assertEqual(SOURCE, sources['Token.sol'])

    def test_collect_sources_missing(self):
        files = dict(FILES)
        del files['@openzeppelin/contracts/utils/Context.sol']
        with self.assertRaises(CompilationError) as ctx:
            collect_sources(SOURCE, files.get)
        self.assertEqual('File not found: @openzeppelin/contracts/utils/Context.sol', str(ctx.exception))

    def test_build_input_json(self):
        input_json = build_input_json({'Token.sol': 'contract A {}'})
        self.assertEqual('Solidity', input_json.language)
        self.assertEqual('contract A {}', input_json.sources['Token.sol'].content)
        self.assertTrue(input_json.settings.optimizer.enabled)
        self.assertEqual(200, input_json.settings.optimizer.runs)
        self.assertEqual(['abi', 'evm.bytecode', 'evm.deployedBytecode'],
                         input_json.settings.outputSelection['*']['*'])

    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_compile_contract(self, compile_standard):
        compile_standard.return_value = solc_output([{'severity': 'warning', 'formattedMessage': 'Warning: unused'}])
        compiled = compile_contract(SOURCE, 'LCHToken', resolve_import=FILES.get, version='0.8.20')

        input_json = compile_standard.call_args[0][0]
        self.assertEqual(SOURCE, input_json['sources']['Token.sol']['content'])
        self.assertEqual('0.8.20', compile_standard.call_args[1]['solc_version'])
        self.assertEqual('LCHToken', compiled.contract_name)
        self.assertEqual('0x6080', compiled.bytecode)
        self.assertEqual('0x6081', compiled.deployed_bytecode)
        self.assertEqual('mint', compiled.abi[0]['name'])
        self.assertEqual(['Warning: unused'], compiled.warnings)

    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_default_contract_selection(self, compile_standard):
        compile_standard.return_value = solc_output()
        compiled = compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.20')
        self.assertEqual('LCHToken', compiled.contract_name)
        compiled = compile_contract(SOURCE, 'Nope', resolve_import=FILES.get, version='0.8.20')
        self.assertEqual('LCHToken', compiled.contract_name)

    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_compile_errors_in_output(self, compile_standard):
        compile_standard.return_value = solc_output([{'severity': 'error', 'formattedMessage': 'TypeError: bad'},
                                                     {'severity': 'error', 'message': 'ParserError: worse'}])
        with self.assertRaises(CompilationError) as ctx:
            compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.20')
        self.assertEqual(['TypeError: bad', 'ParserError: worse'], ctx.exception.errors)
        self.assertTrue(str(ctx.exception).startswith('Compilation failed: TypeError: bad'))

    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_solc_error(self, compile_standard):
        compile_standard.side_effect = SolcError(
            'TypeError: bad', command=['solc'], return_code=1,
            error_dict=[{'severity': 'error', 'formattedMessage': 'TypeError: bad'}])
        with self.assertRaises(CompilationError) as ctx:
            compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.20')
        self.assertEqual(['TypeError: bad'], ctx.exception.errors)

    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_no_contracts(self, compile_standard):
        compile_standard.return_value = {'contracts': {}}
        with self.assertRaises(CompilationError):
            compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.20')

    @mock.patch('token_wizard.shared.solcx.get_installed_solc_versions')
    def test_no_matching_solc(self, installed):
        installed.return_value = ['0.7.6']
        with self.assertRaises(CompilationError):
            compile_contract(SOURCE, resolve_import=FILES.get)

    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    @mock.patch('token_wizard.shared.solcx.get_installed_solc_versions')
    def test_detected_solc(self, installed, compile_standard):
        installed.return_value = ['0.8.19', '0.8.21', '0.8.20']
        compile_standard.return_value = solc_output()
        compiled = compile_contract(SOURCE, resolve_import=FILES.get)
        self.assertEqual('0.8.21', compiled.solc_version)

    @mock.patch('token_wizard.compiler.solcx.install_solc')
    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_missing_solc_version(self, compile_standard, install_solc):
        with self.assertRaises(CompilationError) as ctx:
            compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.99')
        self.assertIn('0.8.99 is not installed', str(ctx.exception))
        install_solc.assert_not_called()
        compile_standard.assert_not_called()

    @mock.patch('token_wizard.compiler.solcx.install_solc')
    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_install_missing_solc(self, compile_standard, install_solc):
        compile_standard.return_value = solc_output()
        compiled = compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.24', try_install_solc=True)
        install_solc.assert_called_once_with('0.8.24')
        self.assertEqual('0.8.24', compiled.solc_version)

    @mock.patch('token_wizard.compiler.solcx.install_solc')
    def test_install_failure(self, install_solc):
        install_solc.side_effect = SolcInstallationError('Solc binary for v0.8.99 is not available')
        with self.assertRaises(CompilationError) as ctx:
            compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.99', try_install_solc=True)
        self.assertIn('Cannot install solc 0.8.99', str(ctx.exception))

    @mock.patch('token_wizard.compiler.solcx.compile_standard')
    def test_solc_removed_before_compile(self, compile_standard):
        compile_standard.side_effect = SolcNotInstalled('solc 0.8.20 has not been installed')
        with self.assertRaises(CompilationError):
            compile_contract(SOURCE, resolve_import=FILES.get, version='0.8.20')
